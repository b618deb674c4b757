from typing import Any

from fastapi import HTTPException, Request

from login_activity.core.config import BACKEND_TOKEN
from login_activity.services.google_reports import (
    ReportsServiceError,
    build_reports_service,
)


async def verify_token(request: Request) -> None:
    if BACKEND_TOKEN and request.headers.get("X-Backend-Token") != BACKEND_TOKEN:
        raise HTTPException(status_code=401, detail="unauthorized")


def get_reports_service() -> Any:
    try:
        return build_reports_service()
    except ReportsServiceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
