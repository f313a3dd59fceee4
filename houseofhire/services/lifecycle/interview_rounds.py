# -*- coding: utf-8 -*-
"""
面试轮次引擎

每条申请的面试按轮次推进（按 job_id + applicant_id 定位当前未终结的申请）：
- 轮次号必须等于已有最大轮次 + 1（没有轮次时为 1）
- 上一轮必须已结束且结果不是 REJECTED，才能安排下一轮
- 评估只能在轮次结束前记录，同一评估项每轮只能记录一次
"""

from __future__ import annotations

from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.exceptions import (
    AlreadyClosed,
    ApplicationNotActive,
    DuplicateAssessmentType,
    NarrationRequired,
    NotFoundException,
    RoundNotAdvanceable,
    RoundOutOfOrder,
    ScoreOutOfRange,
)
from houseofhire.crud import application_crud, assessment_crud, assessment_type_crud, interview_crud
from houseofhire.models.application import ApplicationStatus, JobApplication
from houseofhire.models.assessment import MAX_SCORE, MIN_SCORE, Assessment, AssessmentCreate
from houseofhire.models.interview import InterviewScheduleRequest, InterviewSession, RoundOutcome
from .application_state import ApplicationStateMachine
from .permissions import Actor, require_admin


class InterviewRoundEngine:
    """面试轮次引擎"""

    def __init__(self, state_machine: Optional[ApplicationStateMachine] = None):
        self.state_machine = state_machine or ApplicationStateMachine()

    async def schedule_round(
        self,
        db: AsyncSession,
        actor: Actor,
        data: InterviewScheduleRequest,
    ) -> Tuple[InterviewSession, Optional[JobApplication]]:
        """
        安排一轮面试
        
        申请仍为 APPLIED 时同时推进到 IN_PROGRESS
        
        Returns:
            (新建的面试轮次, 被推进的申请；未推进时为 None)
        """
        require_admin(actor, "安排面试")

        application = await application_crud.get_active_for_pair(db, data.job_id, data.applicant_id)
        if not application:
            raise ApplicationNotActive(job_id=data.job_id, applicant_id=data.applicant_id)

        latest = await interview_crud.get_latest_round(db, application.id)
        expected = latest.round_number + 1 if latest else 1
        if data.round_number != expected:
            raise RoundOutOfOrder(
                f"应安排第 {expected} 轮面试",
                expected_round=expected,
                requested_round=data.round_number,
            )
        if latest and not latest.permits_next_round:
            raise RoundNotAdvanceable(
                f"第 {latest.round_number} 轮面试状态为 {latest.status.value}",
                previous_round=latest.round_number,
                previous_status=latest.status.value,
            )

        try:
            session = await interview_crud.create(db, obj_in={
                "job_id": data.job_id,
                "applicant_id": data.applicant_id,
                "application_id": application.id,
                "round_number": data.round_number,
                "interviewer_name": data.interviewer_name,
                "scheduled_at": data.scheduled_at,
                "header_narration": data.header_narration,
                "scheduled_by": actor.id,
            })
        except IntegrityError:
            await db.rollback()
            raise RoundOutOfOrder(
                f"第 {data.round_number} 轮面试已存在",
                requested_round=data.round_number,
            )
        logger.info(
            "面试已安排: job={} applicant={} round={} by={}",
            data.job_id,
            data.applicant_id,
            data.round_number,
            actor,
        )

        promoted = None
        if application.status == ApplicationStatus.APPLIED:
            promoted = await self.state_machine.apply_transition(
                db,
                application,
                ApplicationStatus.IN_PROGRESS,
                actor,
                narration=f"Interview round {data.round_number} scheduled.",
            )
        return session, promoted

    async def record_assessment(
        self,
        db: AsyncSession,
        actor: Actor,
        interview_id: str,
        data: AssessmentCreate,
    ) -> Assessment:
        """记录一条评估（轮次结束前）"""
        require_admin(actor, "记录面试评估")
        if not MIN_SCORE <= data.score <= MAX_SCORE:
            raise ScoreOutOfRange(score=data.score, min=MIN_SCORE, max=MAX_SCORE)
        narration = (data.narration or "").strip()
        if not narration:
            raise NarrationRequired()

        session = await interview_crud.get(db, interview_id)
        if not session:
            raise NotFoundException("面试不存在")
        if session.is_closed:
            raise AlreadyClosed("该轮面试已结束，不能再记录评估", status=session.status.value)
        assessment_type = await assessment_type_crud.get(db, data.assessment_type_id)
        if not assessment_type:
            raise NotFoundException("评估项不存在")

        if await assessment_crud.get_for_type(db, interview_id, data.assessment_type_id):
            raise DuplicateAssessmentType(assessment_type_id=data.assessment_type_id)
        try:
            assessment = await assessment_crud.create(db, obj_in={
                "interview_id": interview_id,
                "assessment_type_id": data.assessment_type_id,
                "narration": narration,
                "score": data.score,
                "recorded_by": actor.id,
            })
        except IntegrityError:
            await db.rollback()
            raise DuplicateAssessmentType(assessment_type_id=data.assessment_type_id)

        logger.info("评估已记录: interview={} type={} score={}", interview_id, data.assessment_type_id, data.score)
        return assessment

    async def close_round(
        self,
        db: AsyncSession,
        actor: Actor,
        interview_id: str,
        outcome: RoundOutcome,
        closing_narration: Optional[str],
    ) -> Tuple[InterviewSession, Optional[JobApplication]]:
        """
        结束一轮面试
        
        结果为 REJECTED 时，对应的申请在同一事务中变更为 REJECTED
        
        Returns:
            (结束后的面试轮次, 被拒绝的申请；未变更时为 None)
        """
        require_admin(actor, "结束面试")
        narration = (closing_narration or "").strip()
        if not narration:
            raise NarrationRequired("必须填写面试结束说明")

        session = await interview_crud.get(db, interview_id)
        if not session:
            raise NotFoundException("面试不存在")
        closed = await interview_crud.close(
            db,
            db_obj=session,
            outcome=outcome,
            closing_narration=narration,
            closed_by=actor.id,
        )
        if not closed:
            raise AlreadyClosed(status=session.status.value)
        logger.info("面试已结束: id={} round={} outcome={} by={}", session.id, session.round_number, outcome.value, actor)

        rejected = None
        if outcome == RoundOutcome.REJECTED:
            application = await application_crud.get(db, session.application_id)
            if application and not application.is_terminal:
                rejected = await self.state_machine.apply_transition(
                    db,
                    application,
                    ApplicationStatus.REJECTED,
                    actor,
                    narration=narration,
                )
        return session, rejected
