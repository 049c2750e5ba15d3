"""
Dependency injection (dishka) setup.

    app_provider.py             handlers and services (ports only)
    infrastructure_provider.py  Prisma / Redis / Supabase / change feed adapters
    container.py                create_container()
"""
