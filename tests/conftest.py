"""Pytest fixtures and configuration for tickoff tests."""

import pytest
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from tickoff.database.database import Base
from tickoff.database.repository import TaskRepository
from tickoff.models.task import Task, TaskDraft, UPDATABLE_FIELDS
from tickoff.models.task_factory import create_task_base
from tickoff.storage.base import TaskStore, require_identity
from tickoff.storage.errors import StorageError


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Wednesday
FIXED_NOW = datetime(2026, 10, 14, 12, 0, 0)


class InMemoryTaskStore(TaskStore):
    """Task store for engine tests with switchable failures.

    Add a method name ("load", "insert", "update", "delete",
    "save_arrangement") to `fail_on` to make that method raise StorageError.
    `fail_after` lets that many update calls succeed before failing.
    """

    def __init__(self, now: datetime = FIXED_NOW):
        self.rows: Dict[str, Task] = {}
        self.fail_on = set()
        self.fail_after: Optional[int] = None
        self.calls: List[tuple] = []
        self.positions: Dict[str, int] = {}
        self.now = now

    def _maybe_fail(self, method: str) -> None:
        if method == "update" and self.fail_after is not None:
            if self.fail_after == 0:
                raise StorageError("update failed")
            self.fail_after -= 1
            return
        if method in self.fail_on:
            raise StorageError(f"{method} failed")

    def seed(self, task: Task) -> Task:
        self.rows[task.id] = task
        return task

    def load(self, identity: Optional[str]) -> List[Task]:
        user_id = require_identity(identity, "load")
        self.calls.append(("load", user_id))
        self._maybe_fail("load")
        owned = [t for t in self.rows.values() if t.user_id == user_id]
        # unpositioned tasks first, newest first; then the saved arrangement
        owned.sort(key=lambda t: t.created_at, reverse=True)
        return sorted(owned, key=lambda t: (t.id in self.positions, self.positions.get(t.id, 0)))

    def insert(self, identity: Optional[str], draft: TaskDraft) -> Task:
        user_id = require_identity(identity, "create")
        self.calls.append(("insert", draft.title))
        self._maybe_fail("insert")
        task = create_task_base(user_id, draft, now=self.now)
        self.rows[task.id] = task
        return task

    def update(self, task_id: str, identity: Optional[str], fields: Dict[str, Any]) -> None:
        user_id = require_identity(identity, "update")
        self.calls.append(("update", task_id, dict(fields)))
        self._maybe_fail("update")
        task = self.rows.get(task_id)
        if task is None or task.user_id != user_id:
            raise StorageError(f"Task {task_id} not found")
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        self.rows[task_id] = Task.model_validate({**task.model_dump(), **changes})

    def delete(self, task_id: str, identity: Optional[str]) -> None:
        user_id = require_identity(identity, "delete")
        self.calls.append(("delete", task_id))
        self._maybe_fail("delete")
        task = self.rows.get(task_id)
        if task is None or task.user_id != user_id:
            raise StorageError(f"Task {task_id} not found")
        del self.rows[task_id]

    def save_arrangement(self, identity: Optional[str], task_ids: List[str]) -> None:
        user_id = require_identity(identity, "reorder")
        self.calls.append(("save_arrangement", list(task_ids)))
        self._maybe_fail("save_arrangement")
        for position, task_id in enumerate(task_ids):
            task = self.rows.get(task_id)
            if task is None or task.user_id != user_id:
                raise StorageError(f"Task {task_id} not found")
            self.positions[task_id] = position


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def other_user_id():
    return "other-user-456"


@pytest.fixture(scope="function")
def db_session(test_user_id, other_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test,
    seeded with two users.
    """
    from tickoff.database.models import UserDB

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    now = datetime.utcnow()
    for user_id, email in [(test_user_id, "test@example.com"), (other_user_id, "other@example.com")]:
        session.add(UserDB(id=user_id, email=email, name=email, created_at=now, updated_at=now))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def memory_store():
    return InMemoryTaskStore()


@pytest.fixture
def notifications():
    """Collects engine notifications."""
    return []


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "title": "Test Task",
        "description": "Test description",
        "completed": False,
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
        "due_date": None,
        "priority": "medium",
        "tags": [],
        "category_id": None,
        "reminder": None,
        "is_recurring": False,
        "recurring_pattern": None,
        "order": 0,
    }


@pytest.fixture
def make_task(sample_task_base):
    """Factory for Task objects with fresh ids."""
    def _make(**overrides) -> Task:
        return Task(**{**sample_task_base, "id": str(uuid.uuid4()), **overrides})
    return _make


@pytest.fixture
def sample_task(make_task):
    """Create a sample Task object for testing."""
    return make_task()


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from tickoff.models.user import User
    now = datetime.utcnow()
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def test_client(db_session: Session, test_user, monkeypatch):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from tickoff.api.app import app
    from tickoff.database.database import get_db
    from tickoff.auth.dependencies import get_current_user

    monkeypatch.setenv("TICKOFF_STORE", "database")

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
