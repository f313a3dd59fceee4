"""
注册与审核 API 路由
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.database import get_db
from houseofhire.core.response import success_response, paged_response, ResponseModel, PagedResponseModel
from houseofhire.core.exceptions import NotFoundException, ActorNotPermitted
from houseofhire.crud import registration_crud
from houseofhire.models.registration import (
    AccountType,
    AdminRegistrationCreate,
    DeactivateRequest,
    DecisionRequest,
    RegistrationCreate,
    RegistrationResponse,
)
from houseofhire.services.lifecycle import Actor, LifecycleOrchestrator, require_admin
from ..deps import get_actor, get_orchestrator

router = APIRouter()


def _to_response(registration) -> dict:
    return RegistrationResponse.model_validate(registration).model_dump()


@router.post("", summary="自助注册", response_model=ResponseModel[RegistrationResponse])
async def register(
    data: RegistrationCreate,
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """注册后需等待管理员审核"""
    result = await orchestrator.register_account(data)
    return success_response(data=_to_response(result.entity), message="注册成功，请等待审核")


@router.post("/admin", summary="管理员代注册", response_model=ResponseModel[RegistrationResponse])
async def register_by_admin(
    data: AdminRegistrationCreate,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """系统生成临时密码并通过邮件发送给用户"""
    result = await orchestrator.register_account_by_admin(actor, data)
    return success_response(data=_to_response(result.entity), message="账号已创建，登录凭据已发送")


@router.get("", summary="获取注册列表", response_model=PagedResponseModel[RegistrationResponse])
async def get_registrations(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    account_type: Optional[AccountType] = Query(None, description="账号类型筛选"),
    pending_only: bool = Query(False, description="只看待审核"),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    require_admin(actor, "查看注册列表")
    skip = (page - 1) * page_size
    registrations = await registration_crud.list_registrations(
        db, account_type=account_type, pending_only=pending_only, skip=skip, limit=page_size
    )
    total = await registration_crud.count_registrations(
        db, account_type=account_type, pending_only=pending_only
    )
    return paged_response([_to_response(r) for r in registrations], total, page, page_size)


@router.get("/{registration_id}", summary="获取注册详情", response_model=ResponseModel[RegistrationResponse])
async def get_registration(
    registration_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    if not (actor.is_admin or actor.id == registration_id):
        raise ActorNotPermitted("只能查看自己的注册信息")
    registration = await registration_crud.get(db, registration_id)
    if not registration:
        raise NotFoundException(f"注册记录不存在: {registration_id}")
    return success_response(data=_to_response(registration))


@router.post("/{registration_id}/approve", summary="审核通过", response_model=ResponseModel[RegistrationResponse])
async def approve_registration(
    registration_id: str,
    data: Optional[DecisionRequest] = None,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    narration = data.narration if data else None
    result = await orchestrator.approve_registration(actor, registration_id, narration)
    return success_response(data=_to_response(result.entity), message="审核通过")


@router.post("/{registration_id}/reject", summary="审核拒绝", response_model=ResponseModel[RegistrationResponse])
async def reject_registration(
    registration_id: str,
    data: DecisionRequest,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """拒绝时必须填写原因"""
    result = await orchestrator.reject_registration(actor, registration_id, data.narration)
    return success_response(data=_to_response(result.entity), message="已拒绝")


@router.post("/{registration_id}/deactivate", summary="停用账号", response_model=ResponseModel[RegistrationResponse])
async def deactivate_registration(
    registration_id: str,
    data: DeactivateRequest,
    actor: Actor = Depends(get_actor),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.deactivate_account(actor, registration_id, data.reason)
    return success_response(data=_to_response(result.entity), message="账号已停用")
