"""Constants for tickoff.

This module centralizes all magic numbers and default values used throughout the application.
"""

from tickoff.models.task import Priority, FilterType, SortType


# Task defaults
DEFAULT_PRIORITY = Priority.MEDIUM

# View defaults
DEFAULT_FILTER = FilterType.ALL
DEFAULT_SORT = SortType.DATE

# Suggestion thresholds
COMPLETED_TODAY_CELEBRATION_THRESHOLD = 5  # completed-today count that earns a congratulation
HIGH_PRIORITY_ACTIVE_LIMIT = 3  # more active high-priority tasks than this triggers a warning

# Suggestion texts
OVERDUE_SUGGESTION = "{count} task(s) are overdue!"
CELEBRATION_SUGGESTION = "Great job! You completed 5+ tasks today 🎉"
HIGH_PRIORITY_SUGGESTION = "Too many high-priority tasks. Consider re-evaluating some of them."
