"""
注册审核模型模块

求职者与招聘方共用一张注册表，由 account_type 区分。
approved / cancelled 互斥，任一置位后记录即为终态
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import EmailStr
from sqlmodel import Field, Column, Text

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class AccountType(str, Enum):
    """账号类型"""
    SEEKER = "seeker"
    RECRUITER = "recruiter"


# ==================== 基础字段定义 ====================

class RegistrationBase(SQLModelBase):
    """注册基础字段"""
    account_type: AccountType = Field(..., index=True, description="账号类型")
    full_name: str = Field(..., min_length=1, max_length=150, description="姓名")
    email: EmailStr = Field(
        ...,
        unique=True,
        index=True,
        description="邮箱",
    )
    mobile_no: Optional[str] = Field(None, max_length=30, description="手机号")
    company_name: Optional[str] = Field(None, max_length=150, description="公司名称（招聘方）")


# ==================== 表模型 ====================

class Registration(RegistrationBase, TimestampMixin, IDMixin, table=True):
    """注册记录表模型"""
    __tablename__ = "registrations"
    
    password_hash: Optional[str] = Field(default=None, max_length=100)
    admin_created: bool = Field(default=False, description="是否由管理员代注册")
    
    # ========== 审核结果 ==========
    approved: bool = Field(default=False, index=True)
    cancelled: bool = Field(default=False, index=True)
    decision_narration: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    decided_by: Optional[str] = Field(default=None, max_length=36)
    decided_at: Optional[datetime] = Field(default=None)
    
    # ========== 账号停用 ==========
    is_active: bool = Field(default=True, index=True)
    deactivation_reason: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    deactivated_at: Optional[datetime] = Field(default=None)
    
    @property
    def is_decided(self) -> bool:
        """是否已审核（通过或拒绝）"""
        return bool(self.approved or self.cancelled)
    
    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, type={self.account_type}, approved={self.approved}, cancelled={self.cancelled})>"


# ==================== 请求 Schema ====================

class RegistrationCreate(RegistrationBase):
    """自助注册请求"""
    password: str = Field(..., min_length=6, max_length=72, description="登录密码")


class AdminRegistrationCreate(RegistrationBase):
    """管理员代注册请求（系统生成临时密码并邮件通知）"""
    pass


class DecisionRequest(SQLModelBase):
    """审核请求；拒绝时 narration 必填"""
    narration: Optional[str] = Field(None, description="审核说明")


class DeactivateRequest(SQLModelBase):
    """停用账号请求"""
    reason: Optional[str] = Field(None, description="停用原因")


# ==================== 响应 Schema ====================

class RegistrationResponse(TimestampResponse):
    """注册记录响应（不含密码）"""
    account_type: AccountType
    full_name: str
    email: str
    mobile_no: Optional[str]
    company_name: Optional[str]
    admin_created: bool
    approved: bool
    cancelled: bool
    decision_narration: Optional[str]
    decided_by: Optional[str]
    decided_at: Optional[datetime]
    is_active: bool
    deactivation_reason: Optional[str]
    deactivated_at: Optional[datetime]
