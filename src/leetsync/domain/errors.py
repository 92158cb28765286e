"""Exception hierarchy shared by the client, the session layer and the interfaces."""


class LeetsyncError(Exception):
    """Base class for every error raised by leetsync."""


class RequestError(LeetsyncError):
    """A remote call ended in a terminal failure."""

    def __init__(self, message: str, status: int | None = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class ChallengeProtocolError(RequestError):
    """401 without a usable challenge/token pair."""


class ChallengeExhausted(RequestError):
    """The server kept issuing challenges past the configured attempt budget."""


class RemoteError(RequestError):
    """Any other non-success status."""


class DecodeError(RequestError):
    """The response body is not a well-formed payload."""


class TransportError(RequestError):
    """The request never produced a response (connection refused, timeout, ...)."""


class NoActiveSession(LeetsyncError):
    """A mutation was requested while no username is known."""


class SessionBusy(LeetsyncError):
    """Another session operation is in flight and the busy policy rejects waiters."""
