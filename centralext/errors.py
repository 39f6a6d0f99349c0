"""Error type raised by the spreadsheet conversion and client code."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Category of an error, mirroring the service error kinds."""

    UNKNOWN = "Unknown"
    SERVER_ERROR = "ServerError"
    CONTRACT_INVALID = "ContractInvalid"
    ENTITY_DOES_NOT_EXIST = "EntityDoesNotExist"
    STATUS_CONFLICT = "StatusConflict"
    COMMUNICATION_ERROR = "CommunicationError"


class EdgeXError(Exception):
    """An error with a kind, a message and an optional underlying cause."""

    def __init__(self, kind: ErrorKind, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.kind = ErrorKind(kind)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        if not self.message:
            return str(self.cause)
        return f"{self.message} -> {self.cause}"