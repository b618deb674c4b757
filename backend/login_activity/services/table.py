"""Column and key-column metadata for the login activity table."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

from login_activity.schemas.login_activity import (
    ColumnInfo,
    KeyColumnInfo,
    TableInfo,
)
from login_activity.services.transforms import (
    Extractor,
    activity_first_event_name,
    activity_tags,
    activity_title,
    from_constant,
    from_field,
)

GLOBAL_SCOPE = "global"


class ColumnType(str, Enum):
    timestamp = "timestamp"
    string = "string"
    json = "json"


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType
    description: str
    extract: Extractor


@dataclass(frozen=True)
class KeyColumn:
    name: str
    required: bool = False
    operators: Tuple[str, ...] = ("=",)


@dataclass(frozen=True)
class TableDefinition:
    name: str
    description: str
    columns: List[Column]
    list_key_columns: List[KeyColumn] = field(default_factory=list)
    get_key_columns: List[KeyColumn] = field(default_factory=list)
    list_tags: Dict[str, str] = field(default_factory=dict)
    get_tags: Dict[str, str] = field(default_factory=dict)

    def project(self, activity: Dict[str, Any]) -> Dict[str, Any]:
        return {column.name: column.extract(activity) for column in self.columns}

    def describe(self) -> TableInfo:
        return TableInfo(
            name=self.name,
            description=self.description,
            columns=[
                ColumnInfo(
                    name=column.name,
                    type=column.type.value,
                    description=column.description,
                )
                for column in self.columns
            ],
            list_key_columns=[_key_column_info(key) for key in self.list_key_columns],
            get_key_columns=[_key_column_info(key) for key in self.get_key_columns],
            list_tags=dict(self.list_tags),
            get_tags=dict(self.get_tags),
        )


def _key_column_info(key: KeyColumn) -> KeyColumnInfo:
    return KeyColumnInfo(
        name=key.name, required=key.required, operators=list(key.operators)
    )


LOGIN_ACTIVITY_TABLE = TableDefinition(
    name="gcp_admin_reports_login_activity",
    description="Google Workspace Admin Reports API - login activity.",
    columns=[
        Column(
            "time",
            ColumnType.timestamp,
            "Time the activity occurred (id.time), RFC3339.",
            from_field("id.time"),
        ),
        Column(
            "actor_email",
            ColumnType.string,
            "Email address of the actor (actor.email).",
            from_field("actor.email"),
        ),
        Column(
            "event_name",
            ColumnType.string,
            "Name of the first event of the activity, e.g. login_success.",
            activity_first_event_name,
        ),
        Column(
            "unique_qualifier",
            ColumnType.string,
            "Unique qualifier of the activity when several share a time (id.uniqueQualifier).",
            from_field("id.uniqueQualifier"),
        ),
        Column(
            "application_name",
            ColumnType.string,
            "Report application name, always 'login' (id.applicationName).",
            from_field("id.applicationName"),
        ),
        Column(
            "actor_profile_id",
            ColumnType.string,
            "Google Workspace profile ID of the actor (actor.profileId).",
            from_field("actor.profileId"),
        ),
        Column(
            "actor_caller_type",
            ColumnType.string,
            "Type of the actor (actor.callerType).",
            from_field("actor.callerType"),
        ),
        Column(
            "ip_address",
            ColumnType.string,
            "IP address of the user performing the action (ipAddress).",
            from_field("ipAddress"),
        ),
        Column(
            "events",
            ColumnType.json,
            "Detailed events of the activity, as JSON.",
            from_field("events"),
        ),
        Column(
            "title",
            ColumnType.string,
            "Title of the activity: time and actor email.",
            activity_title,
        ),
        Column(
            "tags",
            ColumnType.json,
            "Names of the events of the activity.",
            activity_tags,
        ),
        Column(
            "location",
            ColumnType.string,
            "Always 'global'.",
            from_constant(GLOBAL_SCOPE),
        ),
        Column(
            "project",
            ColumnType.string,
            "Always 'global'; login activity is not scoped to a project.",
            from_constant(GLOBAL_SCOPE),
        ),
    ],
    list_key_columns=[
        KeyColumn("time", operators=(">", ">=", "<", "<=", "=")),
        KeyColumn("actor_email"),
        KeyColumn("ip_address"),
        KeyColumn("event_name"),
    ],
    get_key_columns=[
        KeyColumn("time", required=True),
        KeyColumn("unique_qualifier", required=True),
        KeyColumn("actor_email", required=True),
    ],
    list_tags={"service": "admin", "product": "reports", "action": "activities.list"},
    get_tags={"service": "admin", "product": "reports", "action": "activities.get"},
)
