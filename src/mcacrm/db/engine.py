"""SQLModel engine singleton."""

from sqlmodel import SQLModel, create_engine

from mcacrm.config import get_settings

_engine = None


def import_models() -> None:
    """Import every table module so SQLModel.metadata is fully populated."""
    from mcacrm.models import account, application, funding, lookup, party, transaction  # noqa: F401


def get_engine():
    """Return the module-level engine, creating it (and the tables) on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        connect_args = {}
        if settings.database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(settings.database_url, connect_args=connect_args)
        import_models()
        SQLModel.metadata.create_all(_engine)
    return _engine

