import logging
from typing import Any

import httpx
from pydantic import ValidationError

from leetsync.application.challenge import solve_challenge
from leetsync.domain.constants import (
    CHALLENGE_HEADER,
    CHALLENGE_RESPONSE_HEADER,
    CHALLENGE_TOKEN_HEADER,
    DEFAULT_API_URL,
    DEFAULT_MAX_CHALLENGE_ATTEMPTS,
    DELETE_ROW_ENDPOINT,
    GET_TABLE_ENDPOINT,
    INSERT_ROW_ENDPOINT,
    REQUEST_TIMEOUT,
)
from leetsync.domain.errors import (
    ChallengeExhausted,
    ChallengeProtocolError,
    DecodeError,
    RemoteError,
    TransportError,
)
from leetsync.domain.interfaces import CompletionStore
from leetsync.domain.models import Record


class RemoteClient(CompletionStore):
    """Client for the completion table service.

    Every call goes through `call`, which answers the server's
    challenge/response gate transparently before handing back the decoded
    payload.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        max_challenge_attempts: int = DEFAULT_MAX_CHALLENGE_ATTEMPTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.max_challenge_attempts = max_challenge_attempts
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        # Solved challenge headers stay here and ride along on later calls.
        self._headers: dict[str, str] = {"Content-Type": "application/json"}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            )
        return self._client

    async def call(
        self,
        endpoint: str,
        method: str,
        body: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Issue one logical remote call and return its decoded JSON payload.

        A 401 carrying both `X-Challenge` and `X-Challenge-Token` is solved and
        the identical request is sent again, for as long as the server keeps
        offering challenges and the attempt budget lasts. Every other failure
        is terminal.
        """
        client = self._get_client()
        challenges = 0

        while True:
            try:
                resp = await client.request(
                    method, endpoint, params=params, json=body, headers=dict(self._headers)
                )
            except httpx.RequestError as e:
                self.logger.error(f"{method} {endpoint} failed: {e}")
                raise TransportError(f"{method} {endpoint} failed: {e}") from e

            self.logger.debug(f"{method} {endpoint} -> {resp.status_code}")

            if resp.status_code == 401:
                challenge = resp.headers.get(CHALLENGE_HEADER)
                token = resp.headers.get(CHALLENGE_TOKEN_HEADER)
                if not (challenge and token):
                    raise ChallengeProtocolError(
                        f"{method} {endpoint} unauthorized without a challenge",
                        status=resp.status_code,
                        body=resp.text,
                    )
                if challenges >= self.max_challenge_attempts:
                    raise ChallengeExhausted(
                        f"{method} {endpoint} still challenged after {challenges} attempts",
                        status=resp.status_code,
                        body=resp.text,
                    )
                challenges += 1
                solution = solve_challenge(challenge, token)
                self.logger.debug(f"Challenge {challenge!r} solved as {solution}")
                self._headers[CHALLENGE_TOKEN_HEADER] = token
                self._headers[CHALLENGE_RESPONSE_HEADER] = str(solution)
                continue

            if resp.is_error:
                raise RemoteError(
                    f"HTTP error! status: {resp.status_code}",
                    status=resp.status_code,
                    body=resp.text,
                )

            return self._decode(resp)

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(
                f"Malformed response body: {e}", status=resp.status_code, body=resp.text
            ) from e

    async def insert_row(self, username: str, record: Record) -> Any:
        return await self.call(
            INSERT_ROW_ENDPOINT, "POST", record.to_wire(), params={"username": username}
        )

    async def delete_row(self, username: str, problem_id: str) -> Any:
        return await self.call(
            DELETE_ROW_ENDPOINT,
            "DELETE",
            params={"username": username, "problemId": problem_id},
        )

    async def get_table(self, username: str) -> list[Record]:
        """Fetch every completion row for `username`."""
        payload = await self.call(GET_TABLE_ENDPOINT, "GET", params={"username": username})
        rows = payload.get("table") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise DecodeError(f"get-table payload has no table: {payload!r}")
        try:
            return [Record.model_validate(row) for row in rows]
        except ValidationError as e:
            raise DecodeError(f"Malformed table row: {e}") from e

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RemoteClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
