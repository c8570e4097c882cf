"""
Enum definitions for the productivity API.
"""
from enum import Enum


class TodoStatus(str, Enum):
    """Workflow state of a todo."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class TodoPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Recurrence(str, Enum):
    """How an event repeats."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class AttendeeStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"


class ActivityAction(str, Enum):
    """Audit-log action recorded for every write."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
