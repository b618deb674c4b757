"""MCP tool definitions for the login activity table."""

import asyncio
from typing import Any, Dict, List, Optional

from login_activity.schemas.login_activity import LoginActivityQuery, TimeQualifier
from login_activity.services.google_reports import build_reports_service
from login_activity.services.login_activity import (
    MAX_TOTAL_RESULTS,
    PointLookupNotSupported,
    get_login_activity as lookup_login_activity,
    iter_login_activity_rows,
)
from login_activity.services.table import LOGIN_ACTIVITY_TABLE
from login_activity.utils.time import parse_rfc3339


async def list_login_activity(
    time: Optional[List[str]] = None,
    actor_email: Optional[str] = None,
    ip_address: Optional[str] = None,
    event_name: Optional[str] = None,
    limit: Optional[int] = None,
    service: Any = None,
) -> Dict[str, Any]:
    """
    List Google Workspace login activities.

    Args:
        time: Time qualifiers such as [">=2024-06-01T00:00:00Z", "<=2024-06-02T00:00:00Z"].
              Without one, the last 180 days are searched.
        actor_email: Only activities of this user
        ip_address: Only activities from this IP address
        event_name: Only activities with this event, e.g. login_failure
        limit: Maximum rows to return (never more than 500)

    Returns:
        Dict with:
        - rows: Projected login activity rows
        - count: Number of rows returned
        - truncated: Whether the 500 row ceiling was hit
    """
    query = LoginActivityQuery(
        time=[TimeQualifier.parse(value) for value in time or []],
        actor_email=actor_email,
        ip_address=ip_address,
        event_name=event_name,
    )

    def _fetch() -> List[Dict[str, Any]]:
        reports = service if service is not None else build_reports_service()
        return list(iter_login_activity_rows(reports, query, limit=limit))

    rows = await asyncio.to_thread(_fetch)
    return {
        "rows": rows,
        "count": len(rows),
        "truncated": len(rows) >= MAX_TOTAL_RESULTS,
    }


async def describe_login_activity_table() -> Dict[str, Any]:
    """Return column and key-column metadata of the login activity table."""
    return LOGIN_ACTIVITY_TABLE.describe().model_dump()


async def get_login_activity(
    time: str,
    unique_qualifier: str,
    actor_email: str,
    service: Any = None,
) -> Dict[str, Any]:
    """Point lookup by (time, unique_qualifier, actor_email); not supported."""
    try:
        lookup_login_activity(
            service, parse_rfc3339(time), unique_qualifier, actor_email
        )
    except PointLookupNotSupported as exc:
        return {"supported": False, "activity": None, "message": str(exc)}
    return {"supported": True, "activity": None}


# Registry of all available tools
TOOLS = {
    "list_login_activity": list_login_activity,
    "describe_login_activity_table": describe_login_activity_table,
    "get_login_activity": get_login_activity,
}
