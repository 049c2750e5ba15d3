from marketplace_chat.config.settings import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
)


def test_get_config_by_environment(monkeypatch):
    assert get_config("production") is ProductionConfig
    assert get_config("testing") is TestingConfig
    assert get_config("unknown") is DevelopmentConfig

    monkeypatch.setenv("APP_ENV", "production")
    assert get_config() is ProductionConfig


def test_testing_config_does_not_wait_between_retries():
    assert TestingConfig.TESTING is True
    assert TestingConfig.READ_RETRY_MAX_WAIT == 0.0
    assert DevelopmentConfig.DEBUG is True
