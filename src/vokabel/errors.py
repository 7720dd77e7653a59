from typing import Optional


class VokabelError(Exception):
    """Base class for errors raised by the drill core."""


class FetchError(VokabelError):
    """The dataset source answered with a failure status or could not be reached."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        if status is not None:
            message = f"Failed to fetch data from {url}: HTTP {status} {reason}".rstrip()
        else:
            message = f"Failed to fetch data from {url}: {reason or 'transport error'}"
        super().__init__(message)


class ParseError(VokabelError):
    """The raw dataset could not be interpreted at all."""


class UnknownModeError(VokabelError):
    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"Unknown practice mode: {mode}")
