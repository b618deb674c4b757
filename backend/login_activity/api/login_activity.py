import asyncio
import json
from typing import Any, Iterator, List, Optional

import httplib2
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from login_activity.api.deps import get_reports_service, verify_token
from login_activity.schemas.login_activity import (
    LoginActivityQuery,
    LoginActivityResponse,
    LoginActivityRow,
    TableInfo,
    TimeQualifier,
)
from login_activity.services.login_activity import (
    PointLookupNotSupported,
    get_login_activity,
    iter_login_activity_rows,
)
from login_activity.services.table import LOGIN_ACTIVITY_TABLE
from login_activity.utils.time import parse_rfc3339

router = APIRouter(prefix="/login-activity")

# Failures below the HTTP layer: token refresh, DNS, connect and read timeouts.
TRANSPORT_ERRORS = (GoogleAuthError, OSError, httplib2.HttpLib2Error)


def _build_query(
    time: List[str],
    actor_email: Optional[str],
    ip_address: Optional[str],
    event_name: Optional[str],
    event_names: Optional[str],
) -> LoginActivityQuery:
    if event_name and event_names and event_name != event_names:
        raise HTTPException(
            status_code=400,
            detail="event_name and event_names are aliases and must not differ",
        )
    try:
        return LoginActivityQuery(
            time=[TimeQualifier.parse(value) for value in time],
            actor_email=actor_email,
            ip_address=ip_address,
            event_name=event_name or event_names,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _upstream_error_detail(exc: Exception) -> str:
    if isinstance(exc, HttpError):
        return f"Admin Reports API error ({exc.resp.status}): {exc.reason}"
    return f"Admin Reports API request failed: {exc}"


@router.get("/table", response_model=TableInfo)
async def describe_table(_: None = Depends(verify_token)) -> TableInfo:
    return LOGIN_ACTIVITY_TABLE.describe()


@router.get("", response_model=LoginActivityResponse)
async def list_login_activity(
    time: List[str] = Query(default=[]),
    actor_email: Optional[str] = None,
    ip_address: Optional[str] = None,
    event_name: Optional[str] = None,
    event_names: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=0),
    _: None = Depends(verify_token),
    service: Any = Depends(get_reports_service),
) -> LoginActivityResponse:
    query = _build_query(time, actor_email, ip_address, event_name, event_names)
    try:
        rows = await asyncio.to_thread(
            lambda: list(iter_login_activity_rows(service, query, limit=limit))
        )
    except (HttpError,) + TRANSPORT_ERRORS as exc:
        raise HTTPException(status_code=502, detail=_upstream_error_detail(exc))
    return LoginActivityResponse(
        rows=[LoginActivityRow(**row) for row in rows], count=len(rows)
    )


@router.get("/stream")
async def stream_login_activity(
    time: List[str] = Query(default=[]),
    actor_email: Optional[str] = None,
    ip_address: Optional[str] = None,
    event_name: Optional[str] = None,
    event_names: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=0),
    _: None = Depends(verify_token),
    service: Any = Depends(get_reports_service),
) -> StreamingResponse:
    """Stream rows as NDJSON while pages are fetched.

    The status is sent before the first page, so an upstream failure ends
    the stream with one ``{"error": ..., "rows_sent": n}`` line.
    """
    query = _build_query(time, actor_email, ip_address, event_name, event_names)

    def _lines() -> Iterator[str]:
        sent = 0
        try:
            for row in iter_login_activity_rows(service, query, limit=limit):
                yield json.dumps(row) + "\n"
                sent += 1
        except (HttpError,) + TRANSPORT_ERRORS as exc:
            yield json.dumps(
                {"error": _upstream_error_detail(exc), "rows_sent": sent}
            ) + "\n"

    return StreamingResponse(_lines(), media_type="application/x-ndjson")


@router.get("/{unique_qualifier}")
async def get_login_activity_route(
    unique_qualifier: str,
    time: str,
    actor_email: str,
    _: None = Depends(verify_token),
) -> dict:
    # No Reports service is built: the lookup is refused before any call.
    try:
        activity_time = parse_rfc3339(time)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    try:
        return get_login_activity(None, activity_time, unique_qualifier, actor_email)
    except PointLookupNotSupported as exc:
        raise HTTPException(status_code=501, detail=str(exc))
