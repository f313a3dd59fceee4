"""
投递申请 API 路由
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.database import get_db
from houseofhire.core.response import success_response, paged_response, ResponseModel, PagedResponseModel
from houseofhire.core.exceptions import NotFoundException, ActorNotPermitted
from houseofhire.crud import application_crud, job_crud, registration_crud
from houseofhire.models.application import (
    ApplicationHistoryItem,
    ApplicationResponse,
    ApplicationStatus,
    ApplicationSubmit,
    ApplicationTransitionRequest,
    JobApplication,
)
from houseofhire.services.lifecycle import Actor, ActorRole, LifecycleOrchestrator
from ..deps import get_actor, get_orchestrator

router = APIRouter()


async def _to_response(db: AsyncSession, application: JobApplication) -> dict:
    response = ApplicationResponse.model_validate(application)
    job = await job_crud.get(db, application.job_id)
    if job:
        response.job_title = job.title
    applicant = await registration_crud.get(db, application.applicant_id)
    if applicant:
        response.applicant_name = applicant.full_name
    return response.model_dump()


async def _get_visible(db: AsyncSession, actor: Actor, application_id: str) -> JobApplication:
    """求职者只能查看自己的申请，招聘方只能查看自己岗位下的申请"""
    application = await application_crud.get(db, application_id)
    if not application:
        raise NotFoundException(f"投递申请不存在: {application_id}")
    if actor.role is ActorRole.SEEKER and application.applicant_id != actor.id:
        raise ActorNotPermitted("只能查看自己的申请")
    if actor.role is ActorRole.RECRUITER:
        job = await job_crud.get(db, application.job_id)
        if job is None or job.recruiter_id != actor.id:
            raise ActorNotPermitted("只能查看自己岗位下的申请")
    return application


@router.post("", summary="投递申请", response_model=ResponseModel[ApplicationResponse])
async def submit_application(
    data: ApplicationSubmit,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """求职者本人投递，或管理员代求职者投递"""
    result = await orchestrator.submit_application(actor, data)
    return success_response(
        data=await _to_response(orchestrator.db, result.entity),
        message="投递成功"
    )


@router.get("", summary="获取投递申请列表", response_model=PagedResponseModel[ApplicationResponse])
async def get_applications(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    job_id: Optional[str] = Query(None, description="岗位ID筛选"),
    applicant_id: Optional[str] = Query(None, description="求职者ID筛选"),
    status: Optional[ApplicationStatus] = Query(None, description="状态筛选"),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    获取投递申请列表，支持按岗位、求职者、状态筛选
    
    求职者只能看到自己的申请
    """
    if actor.role is ActorRole.SEEKER:
        applicant_id = actor.id
    elif actor.role is ActorRole.RECRUITER:
        if not job_id:
            raise ActorNotPermitted("招聘方必须按岗位查询")
        job = await job_crud.get(db, job_id)
        if job is None or job.recruiter_id != actor.id:
            raise ActorNotPermitted("只能查看自己岗位下的申请")
    
    skip = (page - 1) * page_size
    applications = await application_crud.list_applications(
        db, job_id=job_id, applicant_id=applicant_id, status=status, skip=skip, limit=page_size
    )
    total = await application_crud.count_applications(
        db, job_id=job_id, applicant_id=applicant_id, status=status
    )
    items = [await _to_response(db, a) for a in applications]
    return paged_response(items, total, page, page_size)


@router.get("/{application_id}", summary="获取投递申请详情", response_model=ResponseModel[ApplicationResponse])
async def get_application(
    application_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    application = await _get_visible(db, actor, application_id)
    return success_response(data=await _to_response(db, application))


@router.get("/{application_id}/history", summary="获取申请进度", response_model=ResponseModel[list[ApplicationHistoryItem]])
async def get_application_history(
    application_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """按时间正序返回全部状态流转记录（含创建）"""
    application = await _get_visible(db, actor, application_id)
    history = await application_crud.get_history(db, application.id)
    return success_response(
        data=[ApplicationHistoryItem.model_validate(h).model_dump() for h in history]
    )


@router.post("/{application_id}/transition", summary="变更申请状态", response_model=ResponseModel[ApplicationResponse])
async def transition_application(
    application_id: str,
    data: ApplicationTransitionRequest,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """
    变更申请状态（管理员或岗位所属招聘方）
    
    状态变更提交后异步发送邮件通知，通知结果不影响本接口返回
    """
    result = await orchestrator.transition_application(
        actor, application_id, data.status, data.narration
    )
    return success_response(
        data=await _to_response(orchestrator.db, result.entity),
        message="状态已更新"
    )
