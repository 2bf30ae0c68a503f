# backend/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

# Base class for the ORM models
Base = declarative_base()


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def make_engine(database_url: str):
    """Create an engine; SQLite needs check_same_thread=False under FastAPI"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        # SQLite's built-in lower() only folds ASCII
        @event.listens_for(engine, "connect")
        def register_lower(dbapi_connection, connection_record):
            dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    return engine


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
