"""Field extraction for Admin Reports activity records.

Every function here is total: a record with no ``id``, ``actor`` or
``events`` yields an empty value, never an exception.
"""

from typing import Any, Callable, Dict, List, Optional

Extractor = Callable[[Dict[str, Any]], Any]


def from_field(path: str) -> Extractor:
    """Return an extractor for a dotted path such as ``"actor.email"``."""
    keys = path.split(".")

    def _extract(activity: Dict[str, Any]) -> Any:
        value: Any = activity
        for key in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return value

    return _extract


def from_constant(value: Any) -> Extractor:
    def _extract(_: Dict[str, Any]) -> Any:
        return value

    return _extract


def first_event_name(events: Optional[List[Dict[str, Any]]]) -> str:
    if not events:
        return ""
    return events[0].get("name") or ""


def all_event_names(events: Optional[List[Dict[str, Any]]]) -> List[str]:
    if not events:
        return []
    return [event["name"] for event in events if event.get("name")]


def title(timestamp: Optional[str], actor_email: Optional[str]) -> str:
    timestamp = timestamp or ""
    if not actor_email:
        return timestamp
    return f"{timestamp} - {actor_email}"


_activity_time = from_field("id.time")
_activity_actor_email = from_field("actor.email")
_activity_events = from_field("events")


def activity_first_event_name(activity: Dict[str, Any]) -> str:
    return first_event_name(_activity_events(activity))


def activity_tags(activity: Dict[str, Any]) -> List[str]:
    return all_event_names(_activity_events(activity))


def activity_title(activity: Dict[str, Any]) -> str:
    return title(_activity_time(activity), _activity_actor_email(activity))
