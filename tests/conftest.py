"""Pytest configuration and fixtures."""

import os
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.main import app
from src.models import Project, ProjectMember, Task, TaskList, User
from src.models.enums import ProjectRole, UserPlan
from src.services.lifecycle import LifecycleEngine
from src.services.trash_query import TrashQueryService


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class RecordingNotifier:
    """Notifier that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def notify(self, event, entity, actor, project_id=None, data=None):
        self.events.append(
            {
                "event": event,
                "entity": entity,
                "actor": actor,
                "project_id": project_id,
                "data": data,
            }
        )


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/taskhub", "/taskhub_test")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(autouse=True)
def mock_redis():
    """Keep event publishing away from a real Redis server."""
    mock_client = MagicMock()
    with patch("src.services.realtime.get_sync_redis", return_value=mock_client):
        yield mock_client


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, name: str = "Test User") -> AuthHeaders:
    """Register a user through the API and return auth headers."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": "testpass123", "name": name},
    )
    assert response.status_code == 201
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['access_token']}"},
        user_id=data["user"]["id"],
        email=email,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register(client, "test@example.com")


# ----------------------------------------------------------------------
# Service-level fixtures
# ----------------------------------------------------------------------


def make_user(db, email: str, plan: UserPlan = UserPlan.FREE) -> User:
    user = User(email=email, password_hash="not-a-real-hash", name=email.split("@")[0], plan=plan)
    db.add(user)
    db.commit()
    return user


def make_project(db, owner: User, name: str = "Project") -> Project:
    project = Project(owner_id=owner.id, name=name, color="#3b82f6")
    db.add(project)
    db.commit()
    return project


def make_list(db, project: Project, name: str = "List", position: int = 0) -> TaskList:
    task_list = TaskList(project_id=project.id, name=name, position=position)
    db.add(task_list)
    db.commit()
    return task_list


def make_task(db, task_list: TaskList, title: str = "Task") -> Task:
    task = Task(list_id=task_list.id, project_id=task_list.project_id, title=title)
    db.add(task)
    db.commit()
    return task


def add_member(db, project: Project, user: User, role: ProjectRole) -> ProjectMember:
    member = ProjectMember(project_id=project.id, user_id=user.id, role=role)
    db.add(member)
    db.commit()
    return member


@pytest.fixture
def owner(db):
    return make_user(db, "owner@example.com")


@pytest.fixture
def outsider(db):
    return make_user(db, "outsider@example.com")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def lifecycle(db, notifier):
    return LifecycleEngine(db, notifier=notifier)


@pytest.fixture
def trash_query(db):
    return TrashQueryService(db)


@pytest.fixture
def tree(db, owner):
    """Project P with lists L1 (tasks T1, T2) and L2 (task T3)."""
    project = make_project(db, owner, "P")
    l1 = make_list(db, project, "L1", position=1)
    l2 = make_list(db, project, "L2", position=2)
    t1 = make_task(db, l1, "T1")
    t2 = make_task(db, l1, "T2")
    t3 = make_task(db, l2, "T3")
    return {"project": project, "l1": l1, "l2": l2, "t1": t1, "t2": t2, "t3": t3}
