"""Filtering, search and sorting for the presented task sequence.

All functions are pure: they never mutate the tasks or the input list.
"""

import unicodedata
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from tickoff.models.task import Task, FilterType, SortType, Priority
from tickoff.models.constants import DEFAULT_FILTER, DEFAULT_SORT


PRIORITY_RANK = {
    Priority.HIGH.value: 0,
    Priority.MEDIUM.value: 1,
    Priority.LOW.value: 2,
}


class ViewParams(BaseModel):
    """Engine-local view parameters."""

    filter: FilterType = DEFAULT_FILTER
    sort: SortType = DEFAULT_SORT
    search_query: str = ""
    selected_category: Optional[str] = None
    selected_tags: List[str] = Field(default_factory=list)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


def filter_by_status(tasks: Sequence[Task], status: FilterType) -> List[Task]:
    """Keep all, only active, or only completed tasks."""
    if status == FilterType.ACTIVE:
        return [task for task in tasks if not task.completed]
    if status == FilterType.COMPLETED:
        return [task for task in tasks if task.completed]
    return list(tasks)


def filter_by_category(tasks: Sequence[Task], category_id: Optional[str]) -> List[Task]:
    if not category_id:
        return list(tasks)
    return [task for task in tasks if task.category_id == category_id]


def filter_by_tags(tasks: Sequence[Task], tags: Sequence[str]) -> List[Task]:
    """Keep tasks carrying at least one of the selected tags."""
    if not tags:
        return list(tasks)
    wanted = set(tags)
    return [task for task in tasks if wanted.intersection(task.tags)]


def matches_search(task: Task, query: str) -> bool:
    """Case-insensitive substring match on title, description or any tag."""
    if not query.strip():
        return True
    needle = query.lower()
    if needle in task.title.lower():
        return True
    if task.description and needle in task.description.lower():
        return True
    return any(needle in tag.lower() for tag in task.tags)


def collation_key(text: str) -> tuple:
    """Sort key approximating a locale-aware comparison.

    Primary: letters with accents stripped, case-folded. Secondary: accents.
    Tertiary: lowercase sorts before uppercase.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), text.swapcase())


def _due_date_key(task: Task) -> tuple:
    # Tasks without a due date go last and tie with each other.
    if task.due_date is None:
        return (1, 0)
    return (0, task.due_date.toordinal())


def sort_tasks(tasks: Sequence[Task], sort: SortType) -> List[Task]:
    """Stable sort by the selected key."""
    if sort == SortType.DATE:
        return sorted(tasks, key=lambda task: task.created_at, reverse=True)
    if sort == SortType.DUE_DATE:
        return sorted(tasks, key=_due_date_key)
    if sort == SortType.PRIORITY:
        return sorted(tasks, key=lambda task: PRIORITY_RANK.get(task.priority, 1))
    if sort == SortType.NAME:
        return sorted(tasks, key=lambda task: collation_key(task.title))
    return list(tasks)


def present(tasks: Sequence[Task], view: ViewParams) -> List[Task]:
    """Apply status, category, tag and search filters, then sort."""
    result = filter_by_status(tasks, view.filter)
    result = filter_by_category(result, view.selected_category)
    result = filter_by_tags(result, view.selected_tags)
    if view.search_query.strip():
        result = [task for task in result if matches_search(task, view.search_query)]
    return sort_tasks(result, view.sort)


def collect_tags(tasks: Sequence[Task]) -> List[str]:
    """Every distinct tag in the collection, in first-seen order."""
    seen = set()
    tags: List[str] = []
    for task in tasks:
        for tag in task.tags:
            if tag not in seen:
                seen.add(tag)
                tags.append(tag)
    return tags
