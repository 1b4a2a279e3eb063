"""FastAPI web application for tickoff."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from tickoff.api.auth_models import AuthResponse, LoginRequest
from tickoff.auth.credentials import verify_credentials
from tickoff.auth.dependencies import get_current_user, get_task_store
from tickoff.auth.jwt import JWT_EXPIRATION_HOURS, create_access_token
from tickoff.database.database import get_db
from tickoff.database.user_repository import UserRepository
from tickoff.engine.collection import Notification, TaskCollection
from tickoff.engine.views import ViewParams
from tickoff.models.category import Category, DEFAULT_CATEGORIES
from tickoff.models.task import (
    FilterType,
    Priority,
    RecurringPattern,
    SortType,
    Task,
    TaskStats,
)
from tickoff.models.user import User
from tickoff.storage.base import TaskStore

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="tickoff API",
    description="Personal to-do list: create, complete, filter, sort and reorder your tasks",
    version="0.1.0"
)


# Request models
def _clean_title(value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("title must not be empty")
    return value


# Fields an update may clear by sending null.
NULLABLE_FIELDS = {"description", "due_date", "category_id", "reminder", "recurring_pattern"}


class TaskCreateRequest(BaseModel):
    """Request for creating a task."""
    title: str = Field(..., description="Task title (trimmed, must not be empty)")
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Priority = Priority.MEDIUM
    tags: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    reminder: Optional[datetime] = None
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value):
        return _clean_title(value)


class TaskUpdateRequest(BaseModel):
    """Request for updating a task; only the supplied fields change."""
    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
    due_date: Optional[date] = None
    priority: Optional[Priority] = None
    tags: Optional[List[str]] = None
    category_id: Optional[str] = None
    reminder: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[RecurringPattern] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value):
        return _clean_title(value)


class ReorderRequest(BaseModel):
    """Request for a drag-and-drop move within the presented list."""
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


# Response models
class TaskResponse(BaseModel):
    """Response for a single task."""
    task: Task


class TaskListResponse(BaseModel):
    """Response for the presented task list and derived views."""
    tasks: List[Task]
    count: int
    total: int
    view: ViewParams
    stats: TaskStats
    suggestions: List[str]
    all_tags: List[str]
    notifications: List[str] = Field(default_factory=list)


class StatsResponse(BaseModel):
    """Response for statistics and suggestions."""
    stats: TaskStats
    suggestions: List[str]


class CategoriesResponse(BaseModel):
    """Response for the built-in categories."""
    categories: List[Category]


@dataclass
class TaskSession:
    """A task collection for the current request plus the notifications it raised."""
    collection: TaskCollection
    notifications: List[Notification] = field(default_factory=list)

    def failures_since(self, mark: int) -> List[Notification]:
        return self.notifications[mark:]


def get_view_params(
    filter: FilterType = Query(FilterType.ALL, description="all | active | completed"),
    sort: SortType = Query(SortType.DATE, description="date | dueDate | priority | name"),
    q: str = Query("", description="Search text"),
    category: Optional[str] = Query(None, description="Category id"),
    tags: List[str] = Query([], description="Tags (match any)"),
) -> ViewParams:
    return ViewParams(
        filter=filter,
        sort=sort,
        search_query=q,
        selected_category=category,
        selected_tags=tags,
    )


def get_task_session(
    view: ViewParams = Depends(get_view_params),
    current_user: User = Depends(get_current_user),
    store: TaskStore = Depends(get_task_store),
) -> TaskSession:
    """Load the current user's collection with the requested view applied."""
    notifications: List[Notification] = []
    collection = TaskCollection(store, identity=current_user.id, notify=notifications.append)
    collection.set_view(**view.model_dump())
    return TaskSession(collection=collection, notifications=notifications)


def _raise_on_failure(session: TaskSession, mark: int) -> None:
    failures = session.failures_since(mark)
    if failures:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=failures[-1].message)


def _task_response(task: Optional[Task]) -> TaskResponse:
    if task is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Task list is not available")
    return TaskResponse(task=task)


def _list_response(session: TaskSession) -> TaskListResponse:
    collection = session.collection
    presented = collection.tasks
    return TaskListResponse(
        tasks=presented,
        count=len(presented),
        total=len(collection.all_tasks),
        view=collection.view,
        stats=collection.stats,
        suggestions=collection.suggestions,
        all_tags=collection.all_tags,
        notifications=[n.message for n in session.notifications],
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/auth/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Sign in with the configured account and receive a bearer token."""
    if not verify_credentials(request.username, request.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    user = UserRepository(db).get_or_create(email=request.username, name=request.username)
    return AuthResponse(
        access_token=create_access_token(user.id),
        expires_in=JWT_EXPIRATION_HOURS * 3600,
        user=user,
    )


@app.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(current_user: User = Depends(get_current_user)):
    """Sign out. Tokens are stateless; the client discards its token."""
    logger.debug(f"{current_user.display_name} signed out")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/auth/me", response_model=User)
def me(current_user: User = Depends(get_current_user)):
    """Current signed-in identity."""
    return current_user


@app.get("/categories", response_model=CategoriesResponse)
def list_categories():
    """Built-in task categories."""
    return CategoriesResponse(categories=DEFAULT_CATEGORIES)


@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(session: TaskSession = Depends(get_task_session)):
    """Presented tasks with statistics, suggestions and all known tags.

    A failed load degrades to an empty list; the failure is listed in `notifications`.
    """
    return _list_response(session)


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, session: TaskSession = Depends(get_task_session)):
    task = session.collection.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse(task=task)


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(request: TaskCreateRequest, session: TaskSession = Depends(get_task_session)):
    mark = len(session.notifications)
    task = session.collection.add(**request.model_dump())
    _raise_on_failure(session, mark)
    return _task_response(task)


@app.post("/tasks/reorder", response_model=TaskListResponse)
def reorder_tasks(request: ReorderRequest, session: TaskSession = Depends(get_task_session)):
    """Move the task at from_index of the saved arrangement to to_index.

    Indices are bounded by the list GET /tasks returns for the same query
    parameters; the move itself applies to the whole arrangement.
    """
    mark = len(session.notifications)
    moved = session.collection.reorder(request.from_index, request.to_index)
    _raise_on_failure(session, mark)
    if not moved:
        raise HTTPException(status_code=400, detail="Reorder indices are out of range")
    return _list_response(session)


@app.patch("/tasks/{task_id}", response_model=TaskResponse)
def update_task(task_id: str, request: TaskUpdateRequest, session: TaskSession = Depends(get_task_session)):
    if session.collection.get(task_id) is None:
        raise HTTPException(status_code=404, detail="Task not found")
    fields = {
        name: value
        for name, value in request.model_dump(exclude_unset=True).items()
        if value is not None or name in NULLABLE_FIELDS
    }
    mark = len(session.notifications)
    task = session.collection.update(task_id, fields)
    _raise_on_failure(session, mark)
    return _task_response(task)


@app.post("/tasks/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(task_id: str, session: TaskSession = Depends(get_task_session)):
    if session.collection.get(task_id) is None:
        raise HTTPException(status_code=404, detail="Task not found")
    mark = len(session.notifications)
    task = session.collection.toggle_complete(task_id)
    _raise_on_failure(session, mark)
    return _task_response(task)


@app.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, session: TaskSession = Depends(get_task_session)):
    if session.collection.get(task_id) is None:
        raise HTTPException(status_code=404, detail="Task not found")
    mark = len(session.notifications)
    session.collection.delete(task_id)
    _raise_on_failure(session, mark)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/stats", response_model=StatsResponse)
def get_stats(session: TaskSession = Depends(get_task_session)):
    """Statistics and suggestions over the full collection."""
    return StatsResponse(stats=session.collection.stats, suggestions=session.collection.suggestions)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
