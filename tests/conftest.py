import asyncio
import os
import sys
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# 테스트 환경 설정
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

# 프로젝트 루트를 path에 추가
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi_cache import FastAPICache

from tracker.api.database import Base, get_db, install_sqlite_functions
from tracker.api.main import app
from tracker.api.models import ProjectModel
from tracker.config import config

# 테스트용 SQLite DB 설정
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
install_sqlite_functions(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    # 테스트 시작 전 테이블 생성
    Base.metadata.create_all(bind=engine)
    yield
    # 테스트 종료 후 DB 삭제
    engine.dispose()
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(f"./test.db{suffix}"):
            os.remove(f"./test.db{suffix}")


@pytest.fixture
def db():
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    # 트랜잭션 내에서 모든 테스트가 실행되도록 설정
    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(db):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        # InMemoryBackend 저장소는 클래스 단위로 공유되므로 테스트마다 비운다
        asyncio.run(FastAPICache.clear())
        yield c
    del app.dependency_overrides[get_db]


@pytest.fixture
def make_project(db):
    """프로젝트 행을 직접 추가하는 팩토리 (생성 순서대로 created_at 증가)"""
    base_time = datetime(2024, 1, 1)
    seq = count()

    def _make(**fields):
        created = base_time + timedelta(minutes=next(seq))
        fields.setdefault("created_at", created)
        fields.setdefault("updated_at", created)
        project = ProjectModel(**fields)
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _make


@pytest.fixture
def strict_status():
    previous = config.get("projects", "strict_status")
    config.set("projects", "strict_status", True)
    yield
    config.set("projects", "strict_status", previous)
