# -*- coding: utf-8 -*-
"""
投递申请状态机

状态流转表：
    APPLIED     -> IN_PROGRESS | ACCEPTED | REJECTED
    IN_PROGRESS -> HOLD | ACCEPTED | REJECTED
    HOLD        -> IN_PROGRESS | ACCEPTED | REJECTED
    ACCEPTED / REJECTED 为终态

状态机只负责校验和写入（flush），提交由编排器统一完成
"""

from __future__ import annotations

from datetime import date
from typing import Dict, FrozenSet, Optional, Tuple, Union

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.exceptions import (
    ActorNotPermitted,
    CollaboratorUnavailable,
    DeadlinePassed,
    DuplicateApplication,
    InvalidTransition,
    JobClosed,
    MissingResume,
    NotFoundException,
)
from houseofhire.crud import application_crud, job_crud, registration_crud
from houseofhire.models.application import ApplicationStatus, ApplicationSubmit, JobApplication
from houseofhire.models.job import JobStatus
from houseofhire.models.registration import AccountType
from .permissions import Actor, ActorRole

S = ApplicationStatus

ALLOWED_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    S.APPLIED: frozenset({S.IN_PROGRESS, S.ACCEPTED, S.REJECTED}),
    S.IN_PROGRESS: frozenset({S.HOLD, S.ACCEPTED, S.REJECTED}),
    S.HOLD: frozenset({S.IN_PROGRESS, S.ACCEPTED, S.REJECTED}),
    S.ACCEPTED: frozenset(),
    S.REJECTED: frozenset(),
}


def parse_status(value: Union[str, ApplicationStatus]) -> ApplicationStatus:
    """把外部传入的状态值转换为枚举；未知状态视为非法流转"""
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(str(value).strip().upper())
    except ValueError:
        raise InvalidTransition(f"未知的申请状态: {value}", target=str(value))


def check_transition(
    current: ApplicationStatus,
    target: Union[str, ApplicationStatus],
) -> ApplicationStatus:
    """
    校验 current -> target 是否允许
    
    Returns:
        解析后的目标状态
        
    Raises:
        InvalidTransition: 目标与当前相同、当前已是终态或流转表不允许
    """
    target = parse_status(target)
    details = {"current": current.value, "target": target.value}
    if not ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(f"申请已处于终态 {current.value}，不能再变更", **details)
    if target == current:
        raise InvalidTransition(f"申请已经是 {current.value} 状态", **details)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(f"不允许从 {current.value} 变更为 {target.value}", **details)
    return target


class ApplicationStateMachine:
    """投递申请状态机"""

    async def submit(
        self,
        db: AsyncSession,
        actor: Actor,
        data: ApplicationSubmit,
        today: Optional[date] = None,
    ) -> JobApplication:
        """
        创建投递申请（初始状态 APPLIED）
        
        求职者本人或管理员代投递；求职者账号必须已审核通过且未停用
        """
        if not (actor.is_admin or (actor.role is ActorRole.SEEKER and actor.id == data.applicant_id)):
            raise ActorNotPermitted("只能由求职者本人或管理员投递")
        if not (data.resume_ref or "").strip():
            raise MissingResume()

        job = await job_crud.get(db, data.job_id)
        if not job:
            raise NotFoundException("岗位不存在")
        if job.status == JobStatus.CLOSED:
            raise JobClosed(job_id=job.id)
        if job.is_expired(today):
            raise DeadlinePassed(job_id=job.id, deadline=job.deadline.isoformat())

        applicant = await registration_crud.get(db, data.applicant_id)
        if not applicant:
            raise NotFoundException("求职者不存在")
        if applicant.account_type != AccountType.SEEKER or not applicant.approved or not applicant.is_active:
            raise ActorNotPermitted("求职者账号未审核通过或已停用", applicant_id=applicant.id)

        job_id, applicant_id = job.id, applicant.id
        existing = await application_crud.get_active_for_pair(db, job_id, applicant_id)
        if existing:
            raise DuplicateApplication(application_no=existing.application_no)

        try:
            application = await application_crud.create(db, obj_in={
                "application_no": await application_crud.next_application_no(db),
                "job_id": job_id,
                "applicant_id": applicant_id,
                "submitted_by": actor.id,
                "status": ApplicationStatus.APPLIED,
                "resume_ref": data.resume_ref.strip(),
                "cover_letter_ref": data.cover_letter_ref,
                "fit_justification": data.fit_justification,
            })
        except IntegrityError:
            await db.rollback()
            existing = await application_crud.get_active_for_pair(db, job_id, applicant_id)
            if existing:
                raise DuplicateApplication(application_no=existing.application_no)
            # 申请编号被并发占用，整体重试即可
            raise CollaboratorUnavailable("申请编号分配冲突，请重试")

        await application_crud.add_history(
            db,
            application_id=application.id,
            from_status=None,
            to_status=ApplicationStatus.APPLIED,
            actor_id=actor.id,
            actor_role=actor.role.value,
        )
        logger.info("申请已创建: no={} job={} applicant={} by={}", application.application_no, job_id, applicant_id, actor)
        return application

    async def transition(
        self,
        db: AsyncSession,
        actor: Actor,
        application_id: str,
        new_status: Union[str, ApplicationStatus],
        narration: Optional[str] = None,
    ) -> Tuple[JobApplication, ApplicationStatus]:
        """
        变更申请状态（管理员或岗位所属招聘方）
        
        Returns:
            (更新后的申请, 变更前的状态)
        """
        application = await application_crud.get(db, application_id)
        if not application:
            raise NotFoundException("申请不存在")

        if not actor.is_admin:
            job = await job_crud.get(db, application.job_id)
            if actor.role is not ActorRole.RECRUITER or job is None or job.recruiter_id != actor.id:
                raise ActorNotPermitted("只有管理员或岗位所属招聘方可以变更申请状态")

        previous = application.status
        await self.apply_transition(db, application, new_status, actor, narration)
        return application, previous

    async def apply_transition(
        self,
        db: AsyncSession,
        application: JobApplication,
        new_status: Union[str, ApplicationStatus],
        actor: Actor,
        narration: Optional[str] = None,
    ) -> JobApplication:
        """
        校验并写入一次状态流转（不做权限校验，供编排器和面试引擎内部调用）
        
        写入使用 compare-and-set，并发修改时以数据库为准
        """
        current = application.status
        target = check_transition(current, new_status)
        narration = (narration or "").strip() or None

        changed = await application_crud.compare_and_set_status(
            db,
            db_obj=application,
            expected=current,
            target=target,
            narration=narration,
        )
        if not changed:
            raise InvalidTransition(
                "申请状态已被其他操作修改",
                current=application.status.value,
                target=target.value,
            )

        await application_crud.add_history(
            db,
            application_id=application.id,
            from_status=current,
            to_status=target,
            actor_id=actor.id,
            actor_role=actor.role.value,
            narration=narration,
        )
        logger.info(
            "申请状态变更: no={} {} -> {} by={}",
            application.application_no,
            current.value,
            target.value,
            actor,
        )
        return application
