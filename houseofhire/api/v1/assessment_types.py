"""
评估项字典 API 路由
"""
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.core.database import get_db
from houseofhire.core.response import success_response, ResponseModel
from houseofhire.core.exceptions import NotFoundException, ConflictException
from houseofhire.crud import assessment_type_crud
from houseofhire.models.assessment import AssessmentTypeCreate, AssessmentTypeResponse
from houseofhire.services.lifecycle import Actor, require_admin
from ..deps import get_actor

router = APIRouter()


@router.get("", summary="获取评估项列表", response_model=ResponseModel[list[AssessmentTypeResponse]])
async def get_assessment_types(db: AsyncSession = Depends(get_db)):
    types = await assessment_type_crud.list_all(db)
    return success_response(data=[AssessmentTypeResponse.model_validate(t).model_dump() for t in types])


@router.post("", summary="创建评估项", response_model=ResponseModel[AssessmentTypeResponse])
async def create_assessment_type(
    data: AssessmentTypeCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    require_admin(actor, "维护评估项")
    if await assessment_type_crud.get_by_name(db, data.name):
        raise ConflictException(f"评估项已存在: {data.name}")
    try:
        assessment_type = await assessment_type_crud.create(db, obj_in=data)
    except IntegrityError:
        await db.rollback()
        raise ConflictException(f"评估项已存在: {data.name}")
    return success_response(
        data=AssessmentTypeResponse.model_validate(assessment_type).model_dump(),
        message="评估项创建成功"
    )


@router.put("/{type_id}", summary="重命名评估项", response_model=ResponseModel[AssessmentTypeResponse])
async def rename_assessment_type(
    type_id: int,
    data: AssessmentTypeCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    require_admin(actor, "维护评估项")
    assessment_type = await assessment_type_crud.get(db, type_id)
    if not assessment_type:
        raise NotFoundException(f"评估项不存在: {type_id}")
    existing = await assessment_type_crud.get_by_name(db, data.name)
    if existing and existing.id != type_id:
        raise ConflictException(f"评估项已存在: {data.name}")
    assessment_type = await assessment_type_crud.update(db, db_obj=assessment_type, obj_in=data)
    return success_response(
        data=AssessmentTypeResponse.model_validate(assessment_type).model_dump(),
        message="评估项已更新"
    )
