"""Shared constants: headers, user types and grade tables."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

AUTHORIZATION_HEADER = "Authorization"
WEBSOCKET_AUTHORIZATION = "Sec-WebSocket-Protocol"

ONLINE = "在线"
OFFLINE = "离线"

USER_TYPE_TEACHER = "teacher"
USER_TYPE_STUDENT = "student"
USER_TYPE_ADMIN = "admin"

CLASS_NUM_LENGTH = 6

USER_TYPE_TO_INT: Mapping[str, int] = MappingProxyType(
    {
        USER_TYPE_ADMIN: 0,
        USER_TYPE_TEACHER: 1,
        USER_TYPE_STUDENT: 2,
    }
)

USER_TYPE_TO_STRING: Mapping[int, str] = MappingProxyType(
    {code: name for name, code in USER_TYPE_TO_INT.items()}
)

GRADE_GROUPS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "小学": ("一年级", "二年级", "三年级", "四年级", "五年级", "六年级"),
        "初中": ("初一", "初二", "初三"),
        "高中": ("高一", "高二", "高三"),
        "大学": ("大一", "大二", "大三", "大四"),
        "研究生": ("研究生",),
    }
)

GRADE_OPTIONS: tuple[str, ...] = (
    "一年级",
    "二年级",
    "三年级",
    "四年级",
    "五年级",
    "六年级",
    "初一",
    "初二",
    "初三",
    "高一",
    "高二",
    "高三",
    "大一",
    "大二",
    "大三",
    "大四",
    "研究生",
)


def user_type_code(name: str) -> int:
    """Return the stored integer code of a user type name.

    Raises ValueError for a name that is not a known user type.
    """
    try:
        return USER_TYPE_TO_INT[name]
    except KeyError:
        raise ValueError(f"unknown user type: {name!r}") from None


def user_type_name(code: int) -> str:
    """Return the user type name for a stored code, or "" if the code is unknown."""
    return USER_TYPE_TO_STRING.get(code, "")


def grade_group_of(grade: str) -> str | None:
    """Return the school stage a grade belongs to, or None if it belongs to none."""
    return next(
        (group for group, grades in GRADE_GROUPS.items() if grade in grades),
        None,
    )