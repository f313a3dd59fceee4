"""
面试轮次 API 路由
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.database import get_db
from houseofhire.core.response import success_response, paged_response, ResponseModel, PagedResponseModel
from houseofhire.core.exceptions import NotFoundException, ActorNotPermitted
from houseofhire.crud import assessment_crud, interview_crud
from houseofhire.models.assessment import AssessmentCreate, AssessmentResponse
from houseofhire.models.interview import (
    InterviewScheduleRequest,
    InterviewSession,
    InterviewSessionResponse,
    RoundCloseRequest,
    RoundStatus,
)
from houseofhire.services.lifecycle import Actor, ActorRole, LifecycleOrchestrator
from ..deps import get_actor, get_orchestrator

router = APIRouter()


async def _to_response(db: AsyncSession, session: InterviewSession) -> dict:
    """面试详情（含评估与总分/平均分）"""
    response = InterviewSessionResponse.model_validate(session)
    rows = await assessment_crud.get_by_interview(db, session.id)
    response.assessments = []
    for assessment, type_name in rows:
        item = AssessmentResponse.model_validate(assessment)
        item.assessment_name = type_name
        response.assessments.append(item)
    scores = [a.score for a in response.assessments]
    response.total_score = sum(scores)
    response.average_score = round(sum(scores) / len(scores), 2) if scores else None
    return response.model_dump()


@router.post("", summary="安排面试", response_model=ResponseModel[InterviewSessionResponse])
async def schedule_round(
    data: InterviewScheduleRequest,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """
    安排下一轮面试（管理员）
    
    轮次号必须连续；申请仍为 APPLIED 时会被推进为 IN_PROGRESS
    """
    result = await orchestrator.schedule_round(actor, data)
    return success_response(
        data=await _to_response(orchestrator.db, result.entity),
        message=f"第 {result.entity.round_number} 轮面试已安排"
    )


@router.get("", summary="获取面试列表", response_model=PagedResponseModel[InterviewSessionResponse])
async def get_interviews(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    job_id: Optional[str] = Query(None, description="岗位ID筛选"),
    applicant_id: Optional[str] = Query(None, description="求职者ID筛选"),
    status: Optional[RoundStatus] = Query(None, description="状态筛选"),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """按面试时间排序；求职者只能看到自己的面试"""
    if actor.role is ActorRole.SEEKER:
        applicant_id = actor.id
    
    skip = (page - 1) * page_size
    sessions = await interview_crud.list_sessions(
        db, job_id=job_id, applicant_id=applicant_id, status=status, skip=skip, limit=page_size
    )
    total = await interview_crud.count_sessions(
        db, job_id=job_id, applicant_id=applicant_id, status=status
    )
    items = [await _to_response(db, s) for s in sessions]
    return paged_response(items, total, page, page_size)


@router.get("/rounds", summary="获取某求职者在某岗位的全部轮次", response_model=ResponseModel[list[InterviewSessionResponse]])
async def get_rounds(
    job_id: str = Query(..., description="岗位ID"),
    applicant_id: str = Query(..., description="求职者ID"),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    if actor.role is ActorRole.SEEKER and actor.id != applicant_id:
        raise ActorNotPermitted("只能查看自己的面试")
    sessions = await interview_crud.get_rounds(db, job_id, applicant_id)
    return success_response(data=[await _to_response(db, s) for s in sessions])


@router.get("/{interview_id}", summary="获取面试详情", response_model=ResponseModel[InterviewSessionResponse])
async def get_interview(
    interview_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    session = await interview_crud.get(db, interview_id)
    if not session:
        raise NotFoundException(f"面试不存在: {interview_id}")
    if actor.role is ActorRole.SEEKER and session.applicant_id != actor.id:
        raise ActorNotPermitted("只能查看自己的面试")
    return success_response(data=await _to_response(db, session))


@router.post("/{interview_id}/assessments", summary="记录面试评估", response_model=ResponseModel[AssessmentResponse])
async def record_assessment(
    interview_id: str,
    data: AssessmentCreate,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """评分 0-5，说明必填，同一评估项每轮只能记录一次"""
    result = await orchestrator.record_assessment(actor, interview_id, data)
    return success_response(
        data=AssessmentResponse.model_validate(result.entity).model_dump(),
        message="评估已记录"
    )


@router.post("/{interview_id}/close", summary="结束面试", response_model=ResponseModel[InterviewSessionResponse])
async def close_round(
    interview_id: str,
    data: RoundCloseRequest,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """
    结束面试并通知求职者
    
    结果为 REJECTED 时对应申请同时变更为 REJECTED
    """
    result = await orchestrator.close_round(actor, interview_id, data.outcome, data.closing_narration)
    return success_response(
        data=await _to_response(orchestrator.db, result.entity),
        message="面试已结束"
    )
