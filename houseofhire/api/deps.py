"""
API 公共依赖

操作者身份通过请求头显式传入：
    X-Actor-Id: 操作者ID（管理员可为任意标识）
    X-Actor-Role: seeker / recruiter / admin
"""
from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.database import get_db
from houseofhire.core.exceptions import ActorNotPermitted
from houseofhire.services.lifecycle import Actor, ActorRole, LifecycleOrchestrator
from houseofhire.services.notifications import NotificationDispatcher, get_dispatcher


async def get_actor(
    x_actor_id: Optional[str] = Header(None, description="操作者ID"),
    x_actor_role: Optional[str] = Header(None, description="操作者角色"),
) -> Actor:
    """从请求头解析操作者身份"""
    if not x_actor_id or not x_actor_id.strip():
        raise ActorNotPermitted("缺少操作者身份 (X-Actor-Id)")
    try:
        role = ActorRole((x_actor_role or "").strip().lower())
    except ValueError:
        raise ActorNotPermitted(f"无效的操作者角色: {x_actor_role}")
    return Actor(id=x_actor_id.strip(), role=role)


async def get_orchestrator(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> LifecycleOrchestrator:
    """每个请求创建一个编排器，共享全局通知派发器"""
    return LifecycleOrchestrator(db, dispatcher)
