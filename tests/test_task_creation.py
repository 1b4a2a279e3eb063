"""Tests for task creation defaults and validation."""

import pytest
from datetime import date, datetime
import uuid

from tickoff.models.task import Task, TaskDraft, Priority, unique_tags
from tickoff.models.task_factory import create_task_base, create_task_defaults, validate_title
from tickoff.storage.errors import TaskValidationError


class TestTaskCreationDefaults:
    """Test that task creation uses correct default values."""

    def test_default_task_values(self, test_user_id):
        """A draft with only a title gets every default."""
        task = create_task_base(test_user_id, TaskDraft(title="Buy milk"))

        assert task.completed is False
        assert task.priority == "medium"
        assert task.tags == []
        assert task.description is None
        assert task.due_date is None
        assert task.category_id is None
        assert task.reminder is None
        assert task.is_recurring is False
        assert task.recurring_pattern is None
        assert task.order == 0

    def test_defaults_use_constants(self):
        defaults = create_task_defaults()

        assert defaults["priority"] == Priority.MEDIUM
        assert defaults["completed"] is False

    def test_ids_are_unique_uuids(self, test_user_id):
        ids = {create_task_base(test_user_id, TaskDraft(title=f"T{i}")).id for i in range(20)}

        assert len(ids) == 20
        for task_id in ids:
            assert uuid.UUID(task_id).version == 4

    def test_timestamps_come_from_now(self, test_user_id):
        now = datetime(2026, 10, 14, 9, 30)

        task = create_task_base(test_user_id, TaskDraft(title="x"), now=now)

        assert task.created_at == now
        assert task.updated_at == now
        assert task.user_id == test_user_id

    def test_draft_fields_override_defaults(self, test_user_id):
        draft = TaskDraft(
            title="Renew passport",
            due_date=date(2026, 12, 1),
            priority=Priority.HIGH,
            tags=["admin"],
            category_id="personal",
            order=7,
        )

        task = create_task_base(test_user_id, draft)

        assert task.priority == "high"
        assert task.due_date == date(2026, 12, 1)
        assert task.tags == ["admin"]
        assert task.order == 7


class TestTaskValidation:
    """Title and tag rules."""

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    def test_blank_title_is_rejected(self, title, test_user_id):
        with pytest.raises(TaskValidationError):
            create_task_base(test_user_id, TaskDraft(title=title))

    def test_title_is_not_trimmed(self):
        assert validate_title("  padded ") == "  padded "

    def test_tags_are_deduplicated_in_order(self, sample_task_base):
        task = Task(**{**sample_task_base, "tags": ["b", "a", "b", "c", "a"]})

        assert task.tags == ["b", "a", "c"]
        assert unique_tags(None) == []

    def test_unknown_priority_is_rejected(self, sample_task_base):
        with pytest.raises(ValueError):
            Task(**{**sample_task_base, "priority": "urgent"})
