# -*- coding: utf-8 -*-
"""
操作者身份模块

每个生命周期操作都显式接收 Actor，不依赖任何会话级全局状态
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from houseofhire.core.exceptions import ActorNotPermitted


class ActorRole(str, Enum):
    """操作者角色"""
    SEEKER = "seeker"
    RECRUITER = "recruiter"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """发起操作的身份"""
    id: str
    role: ActorRole

    @property
    def is_admin(self) -> bool:
        return self.role is ActorRole.ADMIN

    def __str__(self) -> str:
        return f"{self.role.value}:{self.id}"


def require_role(actor: Actor, *roles: ActorRole, action: str = "") -> None:
    """actor 的角色不在 roles 中时抛出 ActorNotPermitted"""
    if actor.role not in roles:
        raise ActorNotPermitted(
            f"角色 {actor.role.value} 无权{action or '执行该操作'}",
            actor_role=actor.role.value,
        )


def require_admin(actor: Actor, action: str = "") -> None:
    require_role(actor, ActorRole.ADMIN, action=action)
