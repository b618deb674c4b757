from fastapi import FastAPI

from login_activity.api import health
from login_activity.api import login_activity as login_activity_api
from login_activity.core.config import BACKEND_PORT
from login_activity.core.logging import logger

app = FastAPI(title="Workspace Login Activity", version="0.1.0")

app.include_router(health.router)
app.include_router(login_activity_api.router)


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("login activity backend started")


def run() -> None:
    import uvicorn

    uvicorn.run(
        "login_activity.main:app",
        host="127.0.0.1",
        port=BACKEND_PORT,
        log_level="info",
    )


if __name__ == "__main__":
    run()
