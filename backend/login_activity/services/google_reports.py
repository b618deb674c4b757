"""Google Admin Reports API service construction."""

import logging
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from login_activity.core.config import (
    GOOGLE_ACCESS_TOKEN,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_CREDENTIALS_FILE,
    GOOGLE_IMPERSONATED_USER,
    GOOGLE_REFRESH_TOKEN,
)

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# Read-only access to the audit (activity) reports
SCOPES = ["https://www.googleapis.com/auth/admin.reports.audit.readonly"]


class ReportsServiceError(Exception):
    """Raised when an authenticated Reports API service cannot be built."""


def get_credentials(
    credentials_file: Optional[str] = None,
    subject: Optional[str] = None,
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
):
    """Load credentials from a service account key or pre-issued OAuth tokens.

    A service account key takes precedence. Admin Reports requires the
    service account to impersonate an administrator (domain-wide delegation),
    so ``subject`` should be set alongside it.
    """
    credentials_file = credentials_file or GOOGLE_CREDENTIALS_FILE
    subject = subject or GOOGLE_IMPERSONATED_USER
    access_token = access_token or GOOGLE_ACCESS_TOKEN
    refresh_token = refresh_token or GOOGLE_REFRESH_TOKEN

    if credentials_file:
        try:
            creds = service_account.Credentials.from_service_account_file(
                credentials_file, scopes=SCOPES
            )
        except (OSError, ValueError, GoogleAuthError) as e:
            raise ReportsServiceError(
                f"Could not load service account key {credentials_file}: {e}"
            ) from e
        if subject:
            creds = creds.with_subject(subject)
        else:
            logger.warning(
                "No GOOGLE_IMPERSONATED_USER set; Admin Reports calls usually "
                "require domain-wide delegation"
            )
        return creds

    if access_token or refresh_token:
        if refresh_token and not (GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET):
            raise ReportsServiceError(
                "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required with a refresh token"
            )
        return Credentials(
            token=access_token or None,
            refresh_token=refresh_token or None,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=GOOGLE_CLIENT_ID or None,
            client_secret=GOOGLE_CLIENT_SECRET or None,
            scopes=SCOPES,
        )

    raise ReportsServiceError(
        "No Google credentials configured. Set GOOGLE_CREDENTIALS_FILE or GOOGLE_ACCESS_TOKEN."
    )


def build_reports_service(credentials=None):
    """Build the Admin SDK Reports API service."""
    try:
        if credentials is None:
            credentials = get_credentials()
        return build(
            "admin", "reports_v1", credentials=credentials, cache_discovery=False
        )
    except ReportsServiceError as e:
        logger.error(f"gcp_admin_reports_login_activity service_error: {e}")
        raise
    except Exception as e:
        logger.error(f"gcp_admin_reports_login_activity service_error: {e}")
        raise ReportsServiceError(f"Could not build Reports API service: {e}") from e
