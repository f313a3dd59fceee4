# -*- coding: utf-8 -*-
"""
注册审核流程

approved / cancelled 任一置位后记录即为终态，
重复审核返回 AlreadyDecided，不会覆盖第一次的审核结果
"""

from __future__ import annotations

from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.exceptions import (
    ActorNotPermitted,
    AlreadyDeactivated,
    AlreadyDecided,
    ConflictException,
    NotFoundException,
    ReasonRequired,
)
from houseofhire.core.security import generate_temp_password, hash_password
from houseofhire.crud import registration_crud
from houseofhire.models.base import utcnow
from houseofhire.models.registration import AdminRegistrationCreate, Registration, RegistrationCreate
from .permissions import Actor, require_admin


class RegistrationWorkflow:
    """注册审核流程"""

    async def _create(self, db: AsyncSession, values: dict) -> Registration:
        values["email"] = values["email"].strip().lower()
        email = values["email"]
        if await registration_crud.get_by_email(db, email):
            raise ConflictException("该邮箱已注册")
        try:
            return await registration_crud.create(db, obj_in=values)
        except IntegrityError:
            await db.rollback()
            raise ConflictException("该邮箱已注册")

    async def register(self, db: AsyncSession, data: RegistrationCreate) -> Registration:
        """自助注册，等待管理员审核"""
        values = data.model_dump(exclude={"password"})
        values["password_hash"] = hash_password(data.password)
        registration = await self._create(db, values)
        logger.info("新注册: id={} type={}", registration.id, registration.account_type.value)
        return registration

    async def register_by_admin(
        self,
        db: AsyncSession,
        actor: Actor,
        data: AdminRegistrationCreate,
        password_length: int = 12,
    ) -> Tuple[Registration, str]:
        """
        管理员代注册
        
        生成临时密码（只保存哈希），账号直接视为审核通过
        
        Returns:
            (注册记录, 临时密码明文；仅用于发送凭据邮件)
        """
        require_admin(actor, "代注册账号")
        password = generate_temp_password(password_length)
        values = data.model_dump()
        values.update({
            "password_hash": hash_password(password),
            "admin_created": True,
            "approved": True,
            "decided_by": actor.id,
            "decided_at": utcnow(),
        })
        registration = await self._create(db, values)
        logger.info("管理员代注册: id={} type={} by={}", registration.id, registration.account_type.value, actor)
        return registration, password

    async def _decide(
        self,
        db: AsyncSession,
        actor: Actor,
        registration_id: str,
        approve: bool,
        narration: Optional[str],
    ) -> Registration:
        registration = await registration_crud.get(db, registration_id)
        if not registration:
            raise NotFoundException("注册记录不存在")
        if registration.is_decided:
            raise AlreadyDecided(approved=registration.approved, cancelled=registration.cancelled)

        decided = await registration_crud.decide(
            db,
            db_obj=registration,
            approve=approve,
            narration=narration,
            decided_by=actor.id,
        )
        if not decided:
            raise AlreadyDecided(approved=registration.approved, cancelled=registration.cancelled)
        logger.info(
            "注册审核: id={} result={} by={}",
            registration.id,
            "approved" if approve else "rejected",
            actor,
        )
        return registration

    async def approve(
        self,
        db: AsyncSession,
        actor: Actor,
        registration_id: str,
        narration: Optional[str] = None,
    ) -> Registration:
        """审核通过（说明可选）"""
        require_admin(actor, "审核注册")
        return await self._decide(db, actor, registration_id, True, (narration or "").strip() or None)

    async def reject(
        self,
        db: AsyncSession,
        actor: Actor,
        registration_id: str,
        narration: Optional[str],
    ) -> Registration:
        """审核拒绝（必须填写原因）"""
        require_admin(actor, "审核注册")
        narration = (narration or "").strip()
        if not narration:
            raise ReasonRequired("拒绝注册必须填写原因")
        return await self._decide(db, actor, registration_id, False, narration)

    async def deactivate(
        self,
        db: AsyncSession,
        actor: Actor,
        registration_id: str,
        reason: Optional[str],
    ) -> Registration:
        """停用账号（本人或管理员，必须填写原因）"""
        if not (actor.is_admin or actor.id == registration_id):
            raise ActorNotPermitted("只能停用自己的账号")
        reason = (reason or "").strip()
        if not reason:
            raise ReasonRequired("停用账号必须填写原因")

        registration = await registration_crud.get(db, registration_id)
        if not registration:
            raise NotFoundException("注册记录不存在")
        if not registration.is_active:
            raise AlreadyDeactivated()
        if not await registration_crud.deactivate(db, db_obj=registration, reason=reason):
            raise AlreadyDeactivated()
        logger.info("账号已停用: id={} by={}", registration.id, actor)
        return registration
