"""Paginated fetch of Admin Reports login activities."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from login_activity.schemas.login_activity import (
    LoginActivityQuery,
    TimeOperator,
    TimeQualifier,
)
from login_activity.services.table import LOGIN_ACTIVITY_TABLE
from login_activity.utils.time import format_rfc3339

logger = logging.getLogger(__name__)

LIST_OPERATION = "gcp_admin_reports_login_activity.list"
GET_OPERATION = "gcp_admin_reports_login_activity.get"

USER_KEY = "all"
APPLICATION_NAME = "login"

# Hard ceiling on records emitted per fetch, whatever the caller's limit.
MAX_TOTAL_RESULTS = 500
# Largest maxResults accepted by activities.list.
PROVIDER_MAX_RESULTS = 1000
DEFAULT_LOOKBACK = timedelta(days=180)
# Smallest step of the RFC3339 timestamps sent to the API (millisecond precision).
TIME_RESOLUTION = timedelta(milliseconds=1)

FILTER_FIELDS = (
    ("actor_email", "actor.email"),
    ("ip_address", "ipAddress"),
    ("event_name", "events.name"),
)


class PointLookupNotSupported(Exception):
    """Raised by the point lookup, which the Reports API cannot serve."""


def _floor_ms(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _ceil_ms(value: datetime) -> datetime:
    floor = _floor_ms(value)
    if floor.microsecond != value.microsecond:
        return floor + TIME_RESOLUTION
    return floor


def resolve_time_window(
    qualifiers: List[TimeQualifier], now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Fold time qualifiers into one [start, end] window.

    Later qualifiers overwrite earlier ones for the same bound. ``>`` and
    ``<`` are exclusive: the bound moves one millisecond inward. Bounds are
    whole milliseconds; a sub-millisecond value rounds toward the inside of
    the window, so ``=`` on such a value gives an empty window.
    """
    now = _floor_ms(now or datetime.now(timezone.utc))
    start = now - DEFAULT_LOOKBACK
    end = now
    for qualifier in qualifiers:
        value = qualifier.value
        if qualifier.operator == TimeOperator.eq:
            start = _ceil_ms(value)
            end = _floor_ms(value)
        elif qualifier.operator == TimeOperator.gt:
            start = _floor_ms(value) + TIME_RESOLUTION
        elif qualifier.operator == TimeOperator.ge:
            start = _ceil_ms(value)
        elif qualifier.operator == TimeOperator.lt:
            end = _ceil_ms(value) - TIME_RESOLUTION
        elif qualifier.operator == TimeOperator.le:
            end = _floor_ms(value)
    return start, end


def build_filters(query: LoginActivityQuery) -> List[str]:
    """One ``field=="value"`` expression per equality qualifier that is set."""
    filters = []
    for attribute, api_field in FILTER_FIELDS:
        value = getattr(query, attribute)
        if value:
            filters.append(f'{api_field}=="{value}"')
    return filters


def _page_size(emitted: int, limit: Optional[int]) -> int:
    remaining = MAX_TOTAL_RESULTS - emitted
    if limit is not None:
        remaining = min(remaining, limit - emitted)
    return min(remaining, PROVIDER_MAX_RESULTS)


def iter_login_activities(
    service: Any,
    query: LoginActivityQuery,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Iterator[Dict[str, Any]]:
    """Yield login activities matching ``query``, page by page.

    Stops after MAX_TOTAL_RESULTS records or ``limit`` records, whichever
    comes first, without requesting further pages. The generator is single
    pass; a new call starts a fresh pagination sequence.

    Errors from the API are logged and re-raised. Records already yielded
    are not affected.
    """
    start, end = resolve_time_window(query.time, now=now)
    if start > end:
        logger.debug(
            f"{LIST_OPERATION} empty window {format_rfc3339(start)} > {format_rfc3339(end)}"
        )
        return

    page_size = _page_size(0, limit)
    if page_size <= 0:
        return

    request_params: Dict[str, Any] = {
        "userKey": USER_KEY,
        "applicationName": APPLICATION_NAME,
        "startTime": format_rfc3339(start),
        "endTime": format_rfc3339(end),
    }
    filters = build_filters(query)
    if filters:
        request_params["filters"] = ",".join(filters)
    logger.debug(f"{LIST_OPERATION} params={request_params} limit={limit}")

    emitted = 0
    pages = 0
    page_token = None
    while True:
        params = dict(request_params, maxResults=page_size)
        if page_token:
            params["pageToken"] = page_token

        try:
            result = service.activities().list(**params).execute()
        except Exception as e:
            logger.error(f"{LIST_OPERATION} api_error after {emitted} records: {e}")
            raise
        pages += 1

        for activity in result.get("items") or []:
            yield activity
            emitted += 1
            if emitted >= MAX_TOTAL_RESULTS:
                logger.info(
                    f"{LIST_OPERATION} reached cap of {MAX_TOTAL_RESULTS} records"
                )
                return
            if limit is not None and emitted >= limit:
                logger.info(f"{LIST_OPERATION} reached limit of {limit} records")
                return

        page_token = result.get("nextPageToken")
        if not page_token:
            break
        page_size = _page_size(emitted, limit)
        if page_size <= 0:
            break

    logger.info(f"{LIST_OPERATION} fetched {emitted} records in {pages} pages")


def iter_login_activity_rows(
    service: Any,
    query: LoginActivityQuery,
    limit: Optional[int] = None,
) -> Iterator[Dict[str, Any]]:
    """Project each fetched activity onto the table columns."""
    for activity in iter_login_activities(service, query, limit=limit):
        yield LOGIN_ACTIVITY_TABLE.project(activity)


def get_login_activity(
    service: Any, time: datetime, unique_qualifier: str, actor_email: str
) -> Optional[Dict[str, Any]]:
    """Point lookup by (time, unique_qualifier, actor_email).

    activities.list offers no lookup by unique qualifier, so this always
    raises PointLookupNotSupported instead of guessing a record.
    """
    logger.debug(
        f"{GET_OPERATION} unsupported lookup time={time} "
        f"unique_qualifier={unique_qualifier} actor_email={actor_email}"
    )
    raise PointLookupNotSupported(
        "point lookup of login activities is not supported; "
        "list with time and actor_email qualifiers instead"
    )
