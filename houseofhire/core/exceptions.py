"""
异常处理模块

定义业务异常和全局异常处理器

业务异常分三类:
- 校验错误: 请求在修改任何状态之前即被拒绝
- 业务规则冲突: 每种冲突对应独立的错误类型（data.error）
- 外部协作方故障: 数据库不可用等，以 503 返回，由调用方决定是否整体重试
"""
from typing import Optional

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from sqlalchemy.exc import InterfaceError, OperationalError

from .response import error_response


class AppException(Exception):
    """应用基础异常"""
    
    def __init__(
        self,
        message: str = "服务器内部错误",
        code: int = 500,
        data: dict = None
    ):
        self.message = message
        self.code = code
        self.data = data
        super().__init__(self.message)


class NotFoundException(AppException):
    """资源不存在异常"""
    
    def __init__(self, message: str = "资源不存在"):
        super().__init__(message=message, code=404, data={"error": "NotFound"})


class BadRequestException(AppException):
    """请求参数错误异常"""
    
    def __init__(self, message: str = "请求参数错误"):
        super().__init__(message=message, code=400)


class ConflictException(AppException):
    """资源冲突异常"""
    
    def __init__(self, message: str = "资源已存在"):
        super().__init__(message=message, code=409)


# ==================== 生命周期错误类型 ====================

class LifecycleError(AppException):
    """
    生命周期错误基类
    
    子类通过 error_kind 声明稳定的错误名，响应中以 data.error 返回
    """
    error_kind: str = "LifecycleError"
    status_code: int = 409
    default_message: str = "操作不被允许"
    
    def __init__(self, message: Optional[str] = None, **details):
        data = {"error": self.error_kind}
        data.update(details)
        super().__init__(
            message=message or self.default_message,
            code=self.status_code,
            data=data,
        )


class ValidationFailed(LifecycleError):
    """校验错误（在任何状态修改之前抛出）"""
    error_kind = "ValidationFailed"
    status_code = 400
    default_message = "请求参数校验失败"


class MissingResume(ValidationFailed):
    error_kind = "MissingResume"
    default_message = "投递申请必须附带简历"


class ScoreOutOfRange(ValidationFailed):
    error_kind = "ScoreOutOfRange"
    default_message = "评分必须在 0 到 5 之间"


class ReasonRequired(ValidationFailed):
    error_kind = "ReasonRequired"
    default_message = "必须填写原因说明"


class NarrationRequired(ValidationFailed):
    error_kind = "NarrationRequired"
    default_message = "必须填写评估说明"


class DuplicateApplication(LifecycleError):
    error_kind = "DuplicateApplication"
    default_message = "该求职者已投递此岗位"


class DeadlinePassed(LifecycleError):
    error_kind = "DeadlinePassed"
    default_message = "岗位已过截止日期"


class JobClosed(LifecycleError):
    error_kind = "JobClosed"
    default_message = "岗位已关闭"


class InvalidTransition(LifecycleError):
    error_kind = "InvalidTransition"
    default_message = "不允许的状态流转"


class ApplicationNotActive(LifecycleError):
    error_kind = "ApplicationNotActive"
    default_message = "该求职者在此岗位下没有进行中的申请"


class RoundOutOfOrder(LifecycleError):
    error_kind = "RoundOutOfOrder"
    default_message = "面试轮次顺序错误"


class RoundNotAdvanceable(LifecycleError):
    error_kind = "RoundNotAdvanceable"
    default_message = "上一轮面试结果不允许进入下一轮"


class DuplicateAssessmentType(LifecycleError):
    error_kind = "DuplicateAssessmentType"
    default_message = "该评估项已记录"


class AlreadyClosed(LifecycleError):
    error_kind = "AlreadyClosed"
    default_message = "该轮面试已结束"


class AlreadyDecided(LifecycleError):
    error_kind = "AlreadyDecided"
    default_message = "该注册记录已审核"


class AlreadyDeactivated(LifecycleError):
    error_kind = "AlreadyDeactivated"
    default_message = "该账号已停用"


class ActorNotPermitted(LifecycleError):
    error_kind = "ActorNotPermitted"
    status_code = 403
    default_message = "当前身份无权执行该操作"


class CollaboratorUnavailable(LifecycleError):
    error_kind = "CollaboratorUnavailable"
    status_code = 503
    default_message = "数据存储暂时不可用，请稍后重试"


# ==================== 全局异常处理器 ====================

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """应用异常处理器"""
    logger.warning(f"AppException: {exc.message} | Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.code,
        content=error_response(message=exc.message, code=exc.code, data=exc.data)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP 异常处理器"""
    logger.warning(f"HTTPException: {exc.detail} | Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message=str(exc.detail), code=exc.status_code)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求验证异常处理器"""
    errors = exc.errors()
    error_messages = []
    for error in errors:
        loc = " -> ".join(str(l) for l in error["loc"])
        error_messages.append(f"{loc}: {error['msg']}")
    
    message = "; ".join(error_messages)
    logger.warning(f"ValidationError: {message} | Path: {request.url.path}")
    
    return JSONResponse(
        status_code=422,
        content=error_response(
            message="请求参数验证失败",
            code=422,
            data={"error": "ValidationFailed", "errors": error_messages}
        )
    )


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """数据库连接异常处理器（不做内部重试，由调用方整体重试）"""
    logger.error(f"Database unavailable: {exc} | Path: {request.url.path}")
    err = CollaboratorUnavailable()
    return JSONResponse(
        status_code=err.code,
        content=error_response(message=err.message, code=err.code, data=err.data)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """通用异常处理器"""
    logger.exception(f"Unhandled Exception: {exc} | Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_response(message="服务器内部错误", code=500)
    )


DATABASE_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError)
