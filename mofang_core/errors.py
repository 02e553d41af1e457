"""Custom exception types shared by the board and selection layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ErrorDetails:
    """Structured metadata associated with an exception."""

    code: str
    message: str


class MofangError(Exception):
    """Base class for board and selection related exceptions.

    Subclasses only set ``error_code``; the details are derived from it.
    """

    error_code = "ERR_MOFANG"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.details = ErrorDetails(code=self.error_code, message=message)

    @property
    def code(self) -> str:
        return self.details.code


class IllegalSelectionError(MofangError):
    """Raised when a coordinate outside the board is selected or written."""

    error_code = "ERR_ILLEGAL_SELECTION"


class BoardDealError(MofangError):
    """Raised when a random deal cannot place every piece of its bank."""

    error_code = "ERR_BOARD_DEAL"


__all__ = ["BoardDealError", "ErrorDetails", "IllegalSelectionError", "MofangError"]
