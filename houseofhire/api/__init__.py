"""
API 路由模块
"""
from fastapi import APIRouter

from .v1 import jobs, registrations, applications, interviews, assessment_types

# 创建主路由
api_router = APIRouter()

# 注册各模块路由
api_router.include_router(
    jobs.router,
    prefix="/jobs",
    tags=["岗位管理"]
)
api_router.include_router(
    registrations.router,
    prefix="/registrations",
    tags=["注册审核"]
)
api_router.include_router(
    applications.router,
    prefix="/applications",
    tags=["投递申请"]
)
api_router.include_router(
    interviews.router,
    prefix="/interviews",
    tags=["面试轮次"]
)
api_router.include_router(
    assessment_types.router,
    prefix="/assessment-types",
    tags=["评估项"]
)
