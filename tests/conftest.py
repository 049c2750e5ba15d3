import os
from types import SimpleNamespace

# Must be set before marketplace_chat.config.settings is imported
os.environ.setdefault("SERVICE_AUTH_SECRET", "test-secret-for-marketplace-chat-suite")
os.environ.setdefault("READ_RETRY_MAX_WAIT", "0")

import pytest
from dishka import make_async_container
from fastapi.testclient import TestClient

from marketplace_chat.app import create_app
from marketplace_chat.setup.ioc.app_provider import AppProvider

from fakes import FakeBackend, FakeInfrastructureProvider


@pytest.fixture()
def backend():
    """In-memory stand-ins for the database, storage, Redis and the change feed."""
    return FakeBackend()


@pytest.fixture()
def conversation(backend):
    """A listing whose owner has approved one student, plus an outsider student."""
    owner = backend.add_business("Acme Ltd")
    student = backend.add_student("Sam Student")
    outsider = backend.add_student("Olive Outsider")
    listing = backend.add_listing(owner, title="Build a landing page")
    interest = backend.add_interest(listing, student)
    return SimpleNamespace(
        listing=listing,
        owner=owner,
        student=student,
        outsider=outsider,
        interest=interest,
    )


@pytest.fixture()
def app(backend):
    """FastAPI app wired to the in-memory backend."""
    container = make_async_container(FakeInfrastructureProvider(backend), AppProvider())
    return create_app(container)


@pytest.fixture()
def client(app):
    """A test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client
