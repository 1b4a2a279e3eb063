"""Task store backed by a hosted PostgREST-style `todos` table.

Each operation except `save_arrangement` is one HTTP request. Every read
and write carries the `user_id=eq.<identity>` predicate. The bearer is
either the signed-in user's own access token for the service, so
row-level policies apply, or the service-role key from
REST_STORE_SERVICE_KEY, which bypasses them. The HTTP API signs users in
with its own tokens, so it runs this store with the service-role key and
relies on the identity predicate for scoping. Besides the task columns the
table needs a nullable integer `position` column for saved arrangements.
"""

import logging
import os
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from tickoff.models.task import Task, TaskDraft, UPDATABLE_FIELDS, unique_tags
from tickoff.models.task_factory import validate_title
from tickoff.storage.base import TaskStore, require_identity
from tickoff.storage.errors import StorageError

load_dotenv()

logger = logging.getLogger(__name__)

REST_STORE_URL = os.getenv("REST_STORE_URL")
REST_STORE_API_KEY = os.getenv("REST_STORE_API_KEY")
REST_STORE_SERVICE_KEY = os.getenv("REST_STORE_SERVICE_KEY")
REQUEST_TIMEOUT_SEC = 10


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into a naive UTC datetime."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value.replace("Z", "+00:00")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    # Tolerate rows where a timestamp slipped into the date column.
    return date.fromisoformat(value[:10])


def encode_value(name: str, value: Any) -> Any:
    """Encode one field for the wire: dates without time, timestamps with it."""
    if value is None:
        return None
    if name == "due_date":
        if isinstance(value, datetime):
            value = value.date()
        return value.isoformat()
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    if name == "tags":
        return unique_tags(value)
    return value


def row_to_task(row: Dict[str, Any]) -> Task:
    """Convert a `todos` row into a Task."""
    return Task(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        description=row.get("description"),
        completed=bool(row.get("completed")),
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row.get("updated_at")),
        due_date=_parse_date(row.get("due_date")),
        priority=row.get("priority") or "medium",
        tags=row.get("tags") or [],
        category_id=row.get("category_id"),
        reminder=_parse_timestamp(row.get("reminder")),
        is_recurring=bool(row.get("is_recurring")),
        recurring_pattern=row.get("recurring_pattern"),
        order=row.get("order") or 0,
    )


def draft_to_row(user_id: str, draft: TaskDraft) -> Dict[str, Any]:
    """Build the insert payload; the service assigns id and timestamps."""
    row = {"user_id": user_id, "completed": False}
    for name, value in draft.model_dump().items():
        row[name] = encode_value(name, value)
    return row


class RestTaskStore(TaskStore):
    """Client for the hosted `todos` table."""

    def __init__(self, base_url: str, api_key: str, access_token: Optional[str] = None):
        """Initialize the store.

        Args:
            base_url: Service root, e.g. https://project.example.co
            api_key: Public API key sent with every request
            access_token: Bearer token: the signed-in user's service token or the
                service-role key (defaults to api_key)
        """
        self.url = f"{base_url.rstrip('/')}/rest/v1/todos"
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    @classmethod
    def from_env(cls, access_token: Optional[str] = None) -> "RestTaskStore":
        """Build a store from REST_STORE_URL / REST_STORE_API_KEY.

        Without a user access token the service-role key is required: the
        anonymous key alone sees no rows under row-level policies.
        """
        if not REST_STORE_URL or not REST_STORE_API_KEY:
            raise ValueError("REST_STORE_URL and REST_STORE_API_KEY must be set.")
        bearer = access_token or REST_STORE_SERVICE_KEY
        if not bearer:
            raise ValueError("REST_STORE_SERVICE_KEY must be set when no user access token is given.")
        return cls(REST_STORE_URL, REST_STORE_API_KEY, bearer)

    def _request(self, method: str, params: Dict[str, str], payload: Any = None) -> List[Dict[str, Any]]:
        try:
            response = requests.request(
                method,
                self.url,
                headers=self.headers,
                params=params,
                json=payload,
                timeout=REQUEST_TIMEOUT_SEC,
            )
            response.raise_for_status()
            return response.json() if response.content else []
        except requests.RequestException as e:
            logger.error(f"Failed to {method} todos: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Task service request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Unreadable todos response: {type(e).__name__}: {str(e)}")
            raise StorageError("Task service returned unreadable data") from e

    def load(self, identity: Optional[str]) -> List[Task]:
        user_id = require_identity(identity, "load")
        rows = self._request(
            "GET",
            {"select": "*", "user_id": f"eq.{user_id}", "order": "position.asc.nullsfirst,created_at.desc"},
        )
        try:
            return [row_to_task(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to parse todos rows: {type(e).__name__}: {str(e)}")
            raise StorageError("Task service returned corrupt rows") from e

    def insert(self, identity: Optional[str], draft: TaskDraft) -> Task:
        user_id = require_identity(identity, "create")
        validate_title(draft.title)
        rows = self._request("POST", {"select": "*"}, draft_to_row(user_id, draft))
        if not rows:
            raise StorageError("Task service did not return the created task")
        task = row_to_task(rows[0])
        logger.debug(f"Created task {task.id}: {task.title[:50]}")
        return task

    def update(self, task_id: str, identity: Optional[str], fields: Dict[str, Any]) -> None:
        user_id = require_identity(identity, "update")
        payload = {
            name: encode_value(name, value)
            for name, value in fields.items()
            if name in UPDATABLE_FIELDS
        }
        rows = self._request("PATCH", {"id": f"eq.{task_id}", "user_id": f"eq.{user_id}"}, payload)
        if not rows:
            raise StorageError(f"Task {task_id} not found")
        logger.debug(f"Updated task {task_id}: {sorted(payload)}")

    def delete(self, task_id: str, identity: Optional[str]) -> None:
        user_id = require_identity(identity, "delete")
        rows = self._request("DELETE", {"id": f"eq.{task_id}", "user_id": f"eq.{user_id}"})
        if not rows:
            raise StorageError(f"Task {task_id} not found")
        logger.debug(f"Deleted task {task_id}")

    def save_arrangement(self, identity: Optional[str], task_ids: List[str]) -> None:
        """Write each task's slot to the `position` column, one request per task."""
        user_id = require_identity(identity, "reorder")
        for position, task_id in enumerate(task_ids):
            rows = self._request(
                "PATCH",
                {"id": f"eq.{task_id}", "user_id": f"eq.{user_id}"},
                {"position": position},
            )
            if not rows:
                raise StorageError(f"Task {task_id} not found")
        logger.debug(f"Saved arrangement of {len(task_ids)} tasks")
