"""Built-in task categories.

Categories are a fixed list; they are not persisted and cannot be created,
edited or deleted. Tasks reference them by id without referential integrity.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class Category(BaseModel):
    """Display classification for tasks."""

    id: str = Field(..., description="Stable category id")
    name: str = Field(..., description="Display name")
    color: str = Field(..., description="Color token")
    icon: str = Field(..., description="Icon glyph")


DEFAULT_CATEGORIES: List[Category] = [
    Category(id="work", name="Work", color="hsl(217, 91%, 60%)", icon="💼"),
    Category(id="personal", name="Personal", color="hsl(142, 70%, 45%)", icon="🏠"),
    Category(id="study", name="Study", color="hsl(262, 83%, 58%)", icon="📚"),
    Category(id="health", name="Health", color="hsl(0, 84%, 60%)", icon="❤️"),
    Category(id="shopping", name="Shopping", color="hsl(32, 95%, 50%)", icon="🛒"),
]


def get_category(category_id: Optional[str]) -> Optional[Category]:
    """Resolve a category id, returning None for unset or dangling references."""
    if not category_id:
        return None
    for category in DEFAULT_CATEGORIES:
        if category.id == category_id:
            return category
    return None
