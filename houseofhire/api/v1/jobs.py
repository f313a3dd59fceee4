"""
岗位 API 路由
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.database import get_db
from houseofhire.core.response import success_response, paged_response, ResponseModel, PagedResponseModel
from houseofhire.core.exceptions import NotFoundException, BadRequestException, ConflictException, ActorNotPermitted
from houseofhire.crud import job_crud
from houseofhire.models.job import JobPostingCreate, JobPostingResponse
from houseofhire.services.lifecycle import Actor, ActorRole, require_role
from ..deps import get_actor

router = APIRouter()


@router.get("", summary="获取岗位列表", response_model=PagedResponseModel[JobPostingResponse])
async def get_jobs(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    open_only: bool = Query(False, description="只返回开放且未过截止日期的岗位"),
    recruiter_id: Optional[str] = Query(None, description="招聘方ID筛选"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    jobs = await job_crud.list_jobs(
        db, open_only=open_only, recruiter_id=recruiter_id, skip=skip, limit=page_size
    )
    total = await job_crud.count_jobs(db, open_only=open_only, recruiter_id=recruiter_id)
    items = [JobPostingResponse.model_validate(j).model_dump() for j in jobs]
    return paged_response(items, total, page, page_size)


@router.post("", summary="发布岗位", response_model=ResponseModel[JobPostingResponse])
async def create_job(
    data: JobPostingCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    招聘方发布自己的岗位；管理员可代招聘方发布
    """
    require_role(actor, ActorRole.RECRUITER, ActorRole.ADMIN, action="发布岗位")
    values = data.model_dump()
    if actor.role is ActorRole.RECRUITER:
        values["recruiter_id"] = actor.id
    elif not values.get("recruiter_id"):
        raise BadRequestException("管理员发布岗位时必须指定 recruiter_id")
    
    job = await job_crud.create(db, obj_in=values)
    return success_response(
        data=JobPostingResponse.model_validate(job).model_dump(),
        message="岗位发布成功"
    )


@router.get("/{job_id}", summary="获取岗位详情", response_model=ResponseModel[JobPostingResponse])
async def get_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    job = await job_crud.get(db, job_id)
    if not job:
        raise NotFoundException(f"岗位不存在: {job_id}")
    return success_response(data=JobPostingResponse.model_validate(job).model_dump())


@router.post("/{job_id}/close", summary="关闭岗位", response_model=ResponseModel[JobPostingResponse])
async def close_job(
    job_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """关闭后不再接受投递，已有申请不受影响"""
    job = await job_crud.get(db, job_id)
    if not job:
        raise NotFoundException(f"岗位不存在: {job_id}")
    if not (actor.is_admin or (actor.role is ActorRole.RECRUITER and job.recruiter_id == actor.id)):
        raise ActorNotPermitted("只有管理员或岗位所属招聘方可以关闭岗位")
    if not await job_crud.close(db, db_obj=job):
        raise ConflictException("岗位已关闭")
    return success_response(
        data=JobPostingResponse.model_validate(job).model_dump(),
        message="岗位已关闭"
    )
