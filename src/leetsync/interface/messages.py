"""Typed request/response contract for the messages the host page sends.

Failures never cross this boundary as raw exceptions. Each response
carries the empty data the host already knows how to render (no records,
`success=False`, `isCompleted=False`) plus an `error` string describing
what went wrong.
"""

import logging
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from leetsync.application.session import SessionManager
from leetsync.domain.errors import LeetsyncError, NoActiveSession
from leetsync.domain.models import Record

logger = logging.getLogger(__name__)


class Message(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class UserInfoRequest(Message):
    should_refresh: bool = False


class UserInfoResponse(Message):
    username: str | None = None
    records: list[Record] = []
    error: str | None = None


class MutationResponse(Message):
    success: bool
    error: str | None = None


class CompletionCheckResponse(Message):
    is_completed: bool


class ErrorResponse(Message):
    error: str


class MessageHandler:
    """Answers host messages on top of a SessionManager."""

    def __init__(self, sessions: SessionManager, completion_window: timedelta):
        self.sessions = sessions
        self.completion_window = completion_window

    async def get_user_info(self, should_refresh: bool = False) -> UserInfoResponse:
        try:
            session = await self.sessions.ensure(should_refresh)
        except LeetsyncError as e:
            logger.error(f"Error getting problem table: {e}")
            return UserInfoResponse(error=str(e))

        if not session.is_active:
            logger.info("User not initialized")
            return UserInfoResponse()
        return UserInfoResponse(username=session.username, records=session.cache.records())

    async def problem_completed(self, record: Record) -> MutationResponse:
        try:
            await self.sessions.record_completion(record)
        except NoActiveSession as e:
            logger.warning(f"Ignoring completion of {record.id}: {e}")
            return MutationResponse(success=False, error=str(e))
        except LeetsyncError as e:
            logger.error(f"Error recording {record.id}: {e}")
            return MutationResponse(success=False, error=str(e))
        return MutationResponse(success=True)

    async def delete_row(self, problem_id: str) -> MutationResponse:
        try:
            await self.sessions.remove_completion(problem_id)
        except NoActiveSession as e:
            logger.warning(f"Ignoring delete of {problem_id}: {e}")
            return MutationResponse(success=False, error=str(e))
        except LeetsyncError as e:
            logger.error(f"Error deleting row {problem_id}: {e}")
            return MutationResponse(success=False, error=str(e))
        return MutationResponse(success=True)

    def check_completed_in_last_day(self, problem_id: str) -> CompletionCheckResponse:
        return CompletionCheckResponse(
            is_completed=self.sessions.was_completed_recently(problem_id, self.completion_window)
        )

    async def dispatch(self, message: dict[str, Any]) -> Message:
        """Route a raw `{"action": ...}` message to its handler."""
        action = message.get("action")
        logger.debug(f"Received message: {message}")

        if action == "getUserInfo":
            try:
                req = UserInfoRequest.model_validate(message)
            except ValidationError as e:
                return UserInfoResponse(error=f"Invalid getUserInfo message: {e}")
            return await self.get_user_info(req.should_refresh)

        if action == "problemCompleted":
            try:
                record = Record.model_validate(message.get("data"))
            except ValidationError as e:
                return MutationResponse(success=False, error=f"Invalid record: {e}")
            return await self.problem_completed(record)

        if action == "deleteRow":
            problem_id = _problem_id(message)
            if not problem_id:
                return MutationResponse(success=False, error="deleteRow requires an id")
            return await self.delete_row(problem_id)

        if action == "checkIfProblemCompletedInLastDay":
            problem_id = _problem_id(message)
            if not problem_id:
                return CompletionCheckResponse(is_completed=False)
            return self.check_completed_in_last_day(problem_id)

        return ErrorResponse(error=f"unknown action {action!r}")


def _problem_id(message: dict[str, Any]) -> str | None:
    # Older host pages send the id as titleSlug.
    value = message.get("id") or message.get("titleSlug")
    return str(value) if value else None
