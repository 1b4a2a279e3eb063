"""FastAPI dependencies: the signed-in user and the task store behind a request."""

import os
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from tickoff.auth.jwt import get_user_id_from_token
from tickoff.database.database import get_db
from tickoff.database.user_repository import UserRepository
from tickoff.models.user import User
from tickoff.storage.base import TaskStore
from tickoff.storage.database_store import DatabaseTaskStore
from tickoff.storage.local_store import LocalTaskStore
from tickoff.storage.rest_store import RestTaskStore

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a stored user, or answer 401."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user_id = get_user_id_from_token(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Invalid or expired token")

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_task_store(db: Session = Depends(get_db)) -> TaskStore:
    """Select the task store named by TICKOFF_STORE (`database`, `local` or `rest`)."""
    kind = os.getenv("TICKOFF_STORE", "database").lower()
    if kind == "local":
        return LocalTaskStore()
    if kind == "rest":
        return RestTaskStore.from_env()
    return DatabaseTaskStore(db)
