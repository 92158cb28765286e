import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from fastapi import Depends, FastAPI, Request
from pydantic import BaseModel

from leetsync.consts import VERSION
from leetsync.domain.models import Record
from leetsync.interface.messages import (
    CompletionCheckResponse,
    MessageHandler,
    MutationResponse,
    UserInfoRequest,
    UserInfoResponse,
)

if TYPE_CHECKING:
    from leetsync.application.config import AppConfig

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("leetsync.server")


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


start_time = time.time()


def _build_handler(config: "AppConfig | None" = None) -> tuple[MessageHandler, Any]:
    from leetsync.application.config import resolve_config
    from leetsync.application.factory import get_remote_client, get_session_manager

    config = config or resolve_config()
    client = get_remote_client(config)
    handler = MessageHandler(
        get_session_manager(config, client),
        completion_window=timedelta(hours=config.completion_window_hours),
    )
    return handler, client


def get_handler(request: Request) -> MessageHandler:
    return request.app.state.handler


def create_app(
    handler: MessageHandler | None = None, config: "AppConfig | None" = None
) -> FastAPI:
    """Build the agent server. Without a handler one is wired from `config` (or the resolved config) on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"leetsync agent v{VERSION} starting up...")
        client = None
        if getattr(app.state, "handler", None) is None:
            app.state.handler, client = _build_handler(config)
        yield
        if client is not None:
            await client.close()
        logger.info("leetsync agent shutting down...")

    app = FastAPI(
        title="leetsync agent",
        description="Local agent keeping completed problems in sync with the repetition service.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.handler = handler

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """
        Simple health check to verify the agent is reachable.
        """
        return HealthResponse(
            status="ok", version=VERSION, uptime_seconds=time.time() - start_time
        )

    @app.get("/version")
    async def get_version():
        return {"version": VERSION}

    @app.post("/messages")
    async def post_message(message: dict[str, Any], handler=Depends(get_handler)):
        """Generic envelope: `{"action": ..., ...}` as the extension sends it."""
        response = await handler.dispatch(message)
        return response.to_wire()

    @app.post("/user-info")
    async def user_info(req: UserInfoRequest, handler=Depends(get_handler)):
        response: UserInfoResponse = await handler.get_user_info(req.should_refresh)
        return response.to_wire()

    @app.post("/problems/completed")
    async def problem_completed(record: Record, handler=Depends(get_handler)):
        response: MutationResponse = await handler.problem_completed(record)
        return response.to_wire()

    @app.delete("/problems/{problem_id}")
    async def delete_problem(problem_id: str, handler=Depends(get_handler)):
        response: MutationResponse = await handler.delete_row(problem_id)
        return response.to_wire()

    @app.get("/problems/{problem_id}/completed-today")
    async def completed_today(problem_id: str, handler=Depends(get_handler)):
        response: CompletionCheckResponse = handler.check_completed_in_last_day(problem_id)
        return response.to_wire()

    return app


app = create_app()
