"""SQLAlchemy database models for tickoff."""

from datetime import datetime
from typing import Union, TypeVar, Type
import uuid
from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, JSON, ForeignKey

from tickoff.database.database import Base
from tickoff.models.task import Priority, RecurringPattern

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T, None]) -> Union[str, None]:
    """Convert enum to string value (handles enum, string and None).

    Args:
        enum_obj: Enum instance, string value or None

    Returns:
        String value of the enum, the string itself if already a string, or None
    """
    if enum_obj is None:
        return None
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class TodoDB(Base):
    """Database model for Task."""

    __tablename__ = "todos"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    priority = Column(String, nullable=False, default=Priority.MEDIUM.value)

    # Date-only due date, full timestamp reminder
    due_date = Column(Date, nullable=True)
    reminder = Column(DateTime, nullable=True)

    # Classification
    category_id = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    # Recurrence flags (stored only)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_pattern = Column(String, nullable=True)

    # Manual display rank
    order = Column("order", Integer, nullable=False, default=0)

    # Saved arrangement slot; NULL until the first saved arrangement after insert
    position = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from tickoff.models.task import Task

        pattern = None
        if self.recurring_pattern:
            pattern = value_to_enum(self.recurring_pattern, RecurringPattern, None)

        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            completed=bool(self.completed),
            created_at=self.created_at,
            updated_at=self.updated_at,
            due_date=self.due_date,
            priority=value_to_enum(self.priority, Priority, Priority.MEDIUM),
            tags=self.tags or [],
            category_id=self.category_id,
            reminder=self.reminder,
            is_recurring=bool(self.is_recurring),
            recurring_pattern=pattern,
            order=self.order or 0,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            description=task.description,
            completed=task.completed,
            created_at=task.created_at,
            updated_at=task.updated_at or task.created_at,
            due_date=task.due_date,
            priority=enum_to_value(task.priority),
            tags=list(task.tags),
            category_id=task.category_id,
            reminder=task.reminder,
            is_recurring=task.is_recurring,
            recurring_pattern=enum_to_value(task.recurring_pattern),
            order=task.order,
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from tickoff.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
