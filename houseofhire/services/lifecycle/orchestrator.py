# -*- coding: utf-8 -*-
"""
生命周期编排器

每个操作按固定顺序执行：
    1. 调用状态机/引擎完成校验和写入
    2. 组装通知（读取岗位、求职者等展示信息）
    3. 提交事务
    4. 派发通知（不等待发送结果）
    5. 返回第 1 步的结果

任一步在提交前失败都会回滚，且不会派发任何通知；
提交之后的任何问题都不会影响返回结果
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.config import settings
from houseofhire.crud import job_crud, registration_crud
from houseofhire.models.application import ApplicationStatus, ApplicationSubmit, JobApplication
from houseofhire.models.assessment import Assessment, AssessmentCreate
from houseofhire.models.interview import InterviewScheduleRequest, InterviewSession, RoundOutcome
from houseofhire.models.registration import AdminRegistrationCreate, Registration, RegistrationCreate
from houseofhire.services.notifications import (
    DeliveryTicket,
    NotificationDispatcher,
    NotificationEvent,
    NotificationRequest,
)
from .application_state import ApplicationStateMachine
from .interview_rounds import InterviewRoundEngine
from .permissions import Actor
from .registration import RegistrationWorkflow


@dataclass
class LifecycleResult:
    """编排结果：entity 为主操作的结果，notifications 为已派发通知的凭据"""
    entity: Any
    notifications: List[DeliveryTicket] = field(default_factory=list)
    application: Optional[JobApplication] = None


class LifecycleOrchestrator:
    """生命周期编排器（每个请求一个实例）"""

    def __init__(self, db: AsyncSession, dispatcher: NotificationDispatcher):
        self.db = db
        self.dispatcher = dispatcher
        self.applications = ApplicationStateMachine()
        self.rounds = InterviewRoundEngine(self.applications)
        self.registrations = RegistrationWorkflow()

    # ==================== 内部工具 ====================

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def _rollback(self) -> None:
        await self.db.rollback()

    def _dispatch(self, requests: List[NotificationRequest]) -> List[DeliveryTicket]:
        tickets = []
        for request in requests:
            try:
                tickets.append(self.dispatcher.dispatch(request))
            except Exception as exc:
                # 状态已提交，派发失败只记录
                logger.opt(exception=exc).error("通知派发失败: {}", request.describe())
        return tickets

    async def _application_notification(self, application: JobApplication) -> Optional[NotificationRequest]:
        job = await job_crud.get(self.db, application.job_id)
        applicant = await registration_crud.get(self.db, application.applicant_id)
        if not job or not applicant:
            logger.warning("申请 {} 缺少岗位或求职者信息，跳过通知", application.application_no)
            return None
        return NotificationRequest(
            event=NotificationEvent.APPLICATION_STATUS,
            recipient=applicant.email,
            context={
                "full_name": applicant.full_name,
                "job_title": job.title,
                "company_name": job.company_name,
                "application_no": application.application_no,
                "status": application.status.value,
                "status_label": application.status.label,
            },
        )

    async def _interview_notification(self, session: InterviewSession) -> Optional[NotificationRequest]:
        job = await job_crud.get(self.db, session.job_id)
        applicant = await registration_crud.get(self.db, session.applicant_id)
        if not job or not applicant:
            logger.warning("面试 {} 缺少岗位或求职者信息，跳过通知", session.id)
            return None
        return NotificationRequest(
            event=NotificationEvent.INTERVIEW_OUTCOME,
            recipient=applicant.email,
            context={
                "full_name": applicant.full_name,
                "job_title": job.title,
                "company_name": job.company_name,
                "round_number": session.round_number,
                "outcome": session.status.value,
            },
        )

    @staticmethod
    def _account_status_notification(registration: Registration) -> NotificationRequest:
        return NotificationRequest(
            event=NotificationEvent.ACCOUNT_STATUS,
            recipient=registration.email,
            context={
                "full_name": registration.full_name,
                "account_type": registration.account_type.value,
                "status": "approved" if registration.approved else "rejected",
                "narration": registration.decision_narration,
            },
        )

    async def _finish(self, entity: Any, requests: List[Optional[NotificationRequest]],
                      application: Optional[JobApplication] = None) -> LifecycleResult:
        await self._commit()
        tickets = self._dispatch([r for r in requests if r is not None])
        return LifecycleResult(entity=entity, notifications=tickets, application=application)

    # ==================== 投递申请 ====================

    async def submit_application(self, actor: Actor, data: ApplicationSubmit) -> LifecycleResult:
        try:
            application = await self.applications.submit(self.db, actor, data)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(application, [], application)

    async def transition_application(
        self,
        actor: Actor,
        application_id: str,
        new_status: Union[str, ApplicationStatus],
        narration: Optional[str] = None,
    ) -> LifecycleResult:
        try:
            application, _ = await self.applications.transition(
                self.db, actor, application_id, new_status, narration
            )
            notification = await self._application_notification(application)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(application, [notification], application)

    # ==================== 面试轮次 ====================

    async def schedule_round(self, actor: Actor, data: InterviewScheduleRequest) -> LifecycleResult:
        try:
            session, promoted = await self.rounds.schedule_round(self.db, actor, data)
            notification = await self._application_notification(promoted) if promoted else None
        except Exception:
            await self._rollback()
            raise
        return await self._finish(session, [notification], promoted)

    async def record_assessment(
        self,
        actor: Actor,
        interview_id: str,
        data: AssessmentCreate,
    ) -> LifecycleResult:
        try:
            assessment: Assessment = await self.rounds.record_assessment(self.db, actor, interview_id, data)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(assessment, [])

    async def close_round(
        self,
        actor: Actor,
        interview_id: str,
        outcome: RoundOutcome,
        closing_narration: Optional[str],
    ) -> LifecycleResult:
        """
        结束面试
        
        结果为 REJECTED 时申请在同一事务中被拒绝，
        但只发送一封面试结果通知
        """
        try:
            session, rejected = await self.rounds.close_round(
                self.db, actor, interview_id, outcome, closing_narration
            )
            notification = await self._interview_notification(session)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(session, [notification], rejected)

    # ==================== 注册审核 ====================

    async def register_account(self, data: RegistrationCreate) -> LifecycleResult:
        try:
            registration = await self.registrations.register(self.db, data)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(registration, [])

    async def register_account_by_admin(self, actor: Actor, data: AdminRegistrationCreate) -> LifecycleResult:
        try:
            registration, password = await self.registrations.register_by_admin(
                self.db, actor, data, password_length=settings.temp_password_length
            )
        except Exception:
            await self._rollback()
            raise
        notification = NotificationRequest(
            event=NotificationEvent.ACCOUNT_CREDENTIALS,
            recipient=registration.email,
            context={
                "full_name": registration.full_name,
                "email": registration.email,
                "password": password,
            },
        )
        return await self._finish(registration, [notification])

    async def approve_registration(
        self,
        actor: Actor,
        registration_id: str,
        narration: Optional[str] = None,
    ) -> LifecycleResult:
        try:
            registration = await self.registrations.approve(self.db, actor, registration_id, narration)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(registration, [self._account_status_notification(registration)])

    async def reject_registration(
        self,
        actor: Actor,
        registration_id: str,
        narration: Optional[str],
    ) -> LifecycleResult:
        try:
            registration = await self.registrations.reject(self.db, actor, registration_id, narration)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(registration, [self._account_status_notification(registration)])

    async def deactivate_account(
        self,
        actor: Actor,
        registration_id: str,
        reason: Optional[str],
    ) -> LifecycleResult:
        try:
            registration = await self.registrations.deactivate(self.db, actor, registration_id, reason)
        except Exception:
            await self._rollback()
            raise
        return await self._finish(registration, [])
