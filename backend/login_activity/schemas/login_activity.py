from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from login_activity.utils.time import parse_rfc3339


class TimeOperator(str, Enum):
    eq = "="
    gt = ">"
    ge = ">="
    lt = "<"
    le = "<="


# Two-character operators first so ">=" is never read as ">".
_OPERATOR_PREFIXES = (
    TimeOperator.ge,
    TimeOperator.le,
    TimeOperator.gt,
    TimeOperator.lt,
    TimeOperator.eq,
)

FILTER_RESERVED_CHARS = ('"', ",")


class TimeQualifier(BaseModel):
    operator: TimeOperator
    value: datetime

    @classmethod
    def parse(cls, raw: str) -> "TimeQualifier":
        """Parse "<op><RFC3339>" such as ">=2024-06-01T00:00:00Z"."""
        text = raw.strip()
        for operator in _OPERATOR_PREFIXES:
            if text.startswith(operator.value):
                value = text[len(operator.value):].strip()
                if not value:
                    raise ValueError(f"missing timestamp in time qualifier: {raw!r}")
                return cls(operator=operator, value=parse_rfc3339(value))
        raise ValueError(
            f"time qualifier must start with one of =, >, >=, <, <=: {raw!r}"
        )


class LoginActivityQuery(BaseModel):
    time: List[TimeQualifier] = Field(default_factory=list)
    actor_email: Optional[str] = None
    ip_address: Optional[str] = None
    event_name: Optional[str] = None

    @field_validator("actor_email", "ip_address", "event_name")
    @classmethod
    def _no_filter_delimiters(cls, value: Optional[str]) -> Optional[str]:
        # Values are quoted into a comma-joined filters string.
        if value and any(char in value for char in FILTER_RESERVED_CHARS):
            raise ValueError(f"filter value may not contain '\"' or ',': {value!r}")
        return value


class LoginActivityRow(BaseModel):
    time: Optional[str] = None
    actor_email: Optional[str] = None
    event_name: str = ""
    unique_qualifier: Optional[str] = None
    application_name: Optional[str] = None
    actor_profile_id: Optional[str] = None
    actor_caller_type: Optional[str] = None
    ip_address: Optional[str] = None
    events: Optional[List[Dict[str, Any]]] = None
    title: str = ""
    tags: List[str] = Field(default_factory=list)
    location: str
    project: str


class LoginActivityResponse(BaseModel):
    rows: List[LoginActivityRow]
    count: int


class ColumnInfo(BaseModel):
    name: str
    type: str
    description: str


class KeyColumnInfo(BaseModel):
    name: str
    required: bool
    operators: List[str]


class TableInfo(BaseModel):
    name: str
    description: str
    columns: List[ColumnInfo]
    list_key_columns: List[KeyColumnInfo]
    get_key_columns: List[KeyColumnInfo]
    list_tags: Dict[str, str]
    get_tags: Dict[str, str]
