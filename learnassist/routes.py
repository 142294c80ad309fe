"""Front-end route table and its filtering by user role."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Sequence

from learnassist.responses import ApiError, request_failure

_ALL_ROLES = ("admin", "teacher", "student")

MISSING_ROLES_MESSAGE = "缺少角色参数"
BAD_ROLES_MESSAGE = "角色参数格式错误，应为 JSON 数组"


@dataclass(frozen=True)
class MetaInfo:
    """Display metadata of a route; ``roles`` limits who may see it."""

    title: str = ""
    icon: str = ""
    affix: bool = False
    roles: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"title": self.title}
        if self.icon:
            out["icon"] = self.icon
        if self.affix:
            out["affix"] = self.affix
        if self.roles:
            out["roles"] = list(self.roles)
        return out


@dataclass(frozen=True)
class RouteInfo:
    """One entry of the route table, possibly with nested children."""

    path: str
    name: str
    component: str
    redirect: str = ""
    hidden: bool = False
    meta: MetaInfo = field(default_factory=MetaInfo)
    children: tuple[RouteInfo, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "path": self.path,
            "name": self.name,
            "component": self.component,
            "redirect": self.redirect,
            "hidden": self.hidden,
            "meta": self.meta.to_dict(),
        }
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


def _page(path: str, name: str, roles: tuple[str, ...]) -> RouteInfo:
    return RouteInfo(
        path=path,
        name=name,
        component=f"views/{path}/index",
        meta=MetaInfo(title=name, icon="dashboard", affix=True, roles=roles),
    )


_PAGES: tuple[RouteInfo, ...] = (
    _page("dashboard", "工作台", _ALL_ROLES),
    _page("users", "用户管理", ("admin",)),
    _page("course", "课程管理", ("admin", "teacher")),
    _page("classes", "班级管理", ("admin",)),
    _page("assignment", "作业管理", ("teacher",)),
    _page("myClass", "我的班级", ("teacher",)),
    _page("myAssignment", "我的作业", ("student",)),
)

FULL_ROUTES: tuple[RouteInfo, ...] = (
    RouteInfo(
        path="/",
        name="常用",
        component="layout/index",
        redirect="dashboard",
        meta=MetaInfo(roles=_ALL_ROLES),
        children=_PAGES,
    ),
    *_PAGES,
    RouteInfo(
        path="/login",
        name="登录",
        component="views/login/index",
        hidden=True,
        meta=MetaInfo(roles=_ALL_ROLES),
    ),
    RouteInfo(
        path="*",
        name="404",
        component="views/404/index",
        hidden=True,
        meta=MetaInfo(roles=_ALL_ROLES),
    ),
)


def filter_routes_by_roles(
    routes: Iterable[RouteInfo], roles: Iterable[str]
) -> list[RouteInfo]:
    """Keep routes that are unrestricted or share a role, filtering children too."""
    wanted = set(roles)
    result = []
    for route in routes:
        if route.meta.roles and wanted.isdisjoint(route.meta.roles):
            continue
        if route.children:
            route = replace(
                route, children=tuple(filter_routes_by_roles(route.children, wanted))
            )
        result.append(route)
    return result


def _parse_roles(role_str: str) -> Sequence[str]:
    try:
        roles = json.loads(role_str)
    except json.JSONDecodeError:
        raise ApiError(request_failure(BAD_ROLES_MESSAGE)) from None
    if roles is None:
        return []
    if not isinstance(roles, list) or not all(
        r is None or isinstance(r, str) for r in roles
    ):
        raise ApiError(request_failure(BAD_ROLES_MESSAGE))
    return ["" if r is None else r for r in roles]


def routes_for_roles_json(role_str: str) -> list[RouteInfo]:
    """Return the route table visible to the roles given as a JSON array string.

    Raises ApiError if the string is empty or not a JSON array of strings.
    """
    if not role_str:
        raise ApiError(request_failure(MISSING_ROLES_MESSAGE))
    return filter_routes_by_roles(FULL_ROUTES, _parse_roles(role_str))