"""MCP server exposing Google Workspace login activity using FastMCP."""

import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from login_activity.mcp.tools import (
    describe_login_activity_table,
    get_login_activity,
    list_login_activity,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "login-activity",
    instructions="""
# Google Workspace Login Activity

This MCP server queries the Admin Reports API for login activity
(login_success, login_failure, logout, ...).

## Available Tools

1. **describe_login_activity_table** - Columns and filterable key columns

2. **list_login_activity** - Login activities matching time and equality filters
   - time accepts "=", ">", ">=", "<", "<=" followed by an RFC3339 timestamp
   - Without a time filter the last 180 days are searched
   - At most 500 rows are returned per call; narrow the time range to page

3. **get_login_activity** - Point lookup; not supported by the Reports API
""",
)


@mcp.tool()
async def list_login_activity_tool(
    time: Optional[List[str]] = None,
    actor_email: Optional[str] = None,
    ip_address: Optional[str] = None,
    event_name: Optional[str] = None,
    limit: Optional[int] = None,
) -> dict:
    """
    List Google Workspace login activities.

    Args:
        time: Time qualifiers, e.g. [">=2024-06-01T00:00:00Z", "<2024-06-02T00:00:00Z"]
        actor_email: Filter by user email
        ip_address: Filter by IP address
        event_name: Filter by event name (login_success, login_failure, ...)
        limit: Max rows (capped at 500)
    """
    return await list_login_activity(
        time=time,
        actor_email=actor_email,
        ip_address=ip_address,
        event_name=event_name,
        limit=limit,
    )


@mcp.tool()
async def describe_login_activity_table_tool() -> dict:
    """Get the columns and key columns of the login activity table."""
    return await describe_login_activity_table()


@mcp.tool()
async def get_login_activity_tool(
    time: str, unique_qualifier: str, actor_email: str
) -> dict:
    """
    Look up one login activity by time, unique qualifier and actor email.

    Always answers supported=false; use list_login_activity instead.
    """
    return await get_login_activity(
        time=time, unique_qualifier=unique_qualifier, actor_email=actor_email
    )


def run_server():
    """Run the MCP server with stdio transport."""
    logger.info("Starting login-activity MCP server...")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_server()
