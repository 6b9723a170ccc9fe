import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from tracker.config import PROJECT_ROOT, config

DB_PATH = os.path.join(PROJECT_ROOT, "projects.db")
SQLALCHEMY_DATABASE_URL = (
    os.getenv("DATABASE_URL") or config.get("database", "url") or f"sqlite:///{DB_PATH}"
)

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)


def casefold(value):
    return value.casefold() if isinstance(value, str) else value


def install_sqlite_functions(target_engine):
    """SQLite lower()는 ASCII만 변환하므로 유니코드 casefold를 SQL 함수로 등록"""

    @event.listens_for(target_engine, "connect")
    def register_casefold(dbapi_connection, connection_record):
        dbapi_connection.create_function("casefold", 1, casefold, deterministic=True)


if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA cache_size=-64000")  # 64MB cache
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    install_sqlite_functions(engine)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
