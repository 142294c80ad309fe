"""Uniform JSON response envelopes and API error codes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from http import HTTPStatus
from typing import Any


class ErrorCode(IntEnum):
    """Application-level codes placed in the response envelope."""

    NO_AUTH = 401
    NORMAL_ERROR = 1
    PANIC_ERROR = -1
    PARAMS_ERROR = 111
    RECORD_NOT_FIND = 4004


SUCCESS_CODE = 200
PARAMS_ERROR_MESSAGE = "参数错误"


@dataclass(frozen=True)
class Resp:
    """A response: HTTP status plus the JSON envelope {code, msg, data}.

    An ``empty`` response carries only its status and has no body.
    """

    code: int
    message: str = ""
    data: Any = None
    status: int = HTTPStatus.OK
    empty: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body; an empty response has an empty body."""
        if self.empty:
            return {}
        return {"code": int(self.code), "msg": self.message, "data": self.data}


class ApiError(Exception):
    """Raised to abort request handling with a prepared failure response."""

    def __init__(self, resp: Resp) -> None:
        super().__init__(resp.message)
        self.resp = resp

    @property
    def status(self) -> int:
        return self.resp.status

    @property
    def code(self) -> int:
        return self.resp.code


def success(data: Any = None) -> Resp:
    """A 200 response carrying ``data``."""
    return Resp(code=SUCCESS_CODE, data=data)


def success_with_failure_message(msg: str, code: int) -> Resp:
    """A 200 response whose envelope reports a failure code and message."""
    return Resp(code=code, message=msg)


def request_failure(msg: str, code: int = ErrorCode.NORMAL_ERROR) -> Resp:
    """A 400 response with the given message and code."""
    return Resp(code=code, message=msg, status=HTTPStatus.BAD_REQUEST)


def params_failure() -> Resp:
    """A 400 response for invalid request parameters."""
    return Resp(
        code=ErrorCode.PARAMS_ERROR,
        message=PARAMS_ERROR_MESSAGE,
        status=HTTPStatus.BAD_REQUEST,
    )


def auth_failure() -> Resp:
    """A bare 401 response with no body."""
    return Resp(code=ErrorCode.NO_AUTH, status=ErrorCode.NO_AUTH, empty=True)


def panic_failure(msg: str) -> Resp:
    """A 500 response for an internal failure."""
    return Resp(
        code=ErrorCode.PANIC_ERROR,
        message=msg,
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
    )