"""Column registry for the tables the store exposes.

The store only accepts identifiers listed here, so sort fields and filter
keys coming from callers can be interpolated into SQL safely.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TableSpec:
    name: str
    columns: frozenset[str]
    json_columns: frozenset[str] = field(default_factory=frozenset)
    bool_columns: frozenset[str] = field(default_factory=frozenset)

    def has_column(self, column: str) -> bool:
        return column in self.columns


def _spec(name: str, columns: str, json_columns: str = "", bool_columns: str = "") -> TableSpec:
    return TableSpec(
        name=name,
        columns=frozenset(columns.split()),
        json_columns=frozenset(json_columns.split()),
        bool_columns=frozenset(bool_columns.split()),
    )


TABLES: dict[str, TableSpec] = {
    spec.name: spec
    for spec in (
        _spec(
            "todos",
            "id title description category_id due_date status priority is_archived "
            "completed_at estimated_duration actual_duration tags attachments subtasks "
            "created_by assigned_to created_at updated_at",
            json_columns="tags attachments subtasks",
            bool_columns="is_archived",
        ),
        _spec(
            "notes",
            "id title content category_id is_archived is_pinned tags attachments "
            "formatting word_count reading_time created_by shared_with created_at updated_at",
            json_columns="tags attachments formatting shared_with",
            bool_columns="is_archived is_pinned",
        ),
        _spec(
            "events",
            "id title description category_id start_time end_time target_date location "
            "is_all_day recurrence recurrence_end_date recurrence_interval attendees "
            "reminders meeting_url is_cancelled created_by created_at updated_at",
            json_columns="attendees reminders",
            bool_columns="is_all_day is_cancelled",
        ),
        _spec(
            "categories",
            "id name color icon description created_by created_at updated_at",
        ),
        _spec(
            "activity_logs",
            "id user_id entity_type entity_id action old_values new_values created_at",
            json_columns="old_values new_values",
        ),
    )
}
