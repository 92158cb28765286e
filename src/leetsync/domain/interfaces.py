"""
Ports (interfaces) to the outside world.

Application services depend on these abstractions, not on concrete adapters.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import Record


class HostBridge(ABC):
    """
    Port for asking the hosting page which user is signed in.

    Implementations:
        - StaticHostBridge: Answers with a configured username.
        - HttpHostBridge: Sends a `setUsername` request to the host over HTTP.
    """

    @abstractmethod
    async def request_username(self) -> str | None:
        """
        Ask the host for the active username.

        Returns:
            The username, or None when nobody is signed in. None is a valid
            answer, not a failure.
        """
        pass


class CompletionStore(ABC):
    """
    Port for the remote table of completed problems.

    Implemented by RemoteClient, which layers the challenge protocol under
    every call.
    """

    @abstractmethod
    async def insert_row(self, username: str, record: Record) -> Any:
        pass

    @abstractmethod
    async def delete_row(self, username: str, problem_id: str) -> Any:
        pass

    @abstractmethod
    async def get_table(self, username: str) -> list[Record]:
        pass
