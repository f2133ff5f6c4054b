from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    NETWORK = "network"
    API = "api"
    IO = "io"


class MiniMaxError(RuntimeError):
    kind: ErrorKind = ErrorKind.API

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.cause = cause


class ConfigurationError(MiniMaxError):
    kind = ErrorKind.CONFIGURATION


class NetworkError(MiniMaxError):
    kind = ErrorKind.NETWORK


class APIError(MiniMaxError):
    kind = ErrorKind.API


class ImageReadError(MiniMaxError):
    """Local image file missing or unreadable."""

    kind = ErrorKind.IO
