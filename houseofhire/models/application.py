"""
投递申请模型模块

JobApplication 只能通过状态流转修改，从不物理删除；
同一 (求职者, 岗位) 同时最多存在一条非终态申请，
数据库层用部分唯一索引兜底并发重复投递
"""
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional
from sqlalchemy import Index, text
from sqlmodel import Field, Column, Text

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse, utcnow


class ApplicationStatus(str, Enum):
    """投递申请状态枚举"""
    APPLIED = "APPLIED"            # 已投递
    IN_PROGRESS = "IN_PROGRESS"    # 处理中
    HOLD = "HOLD"                  # 暂缓
    ACCEPTED = "ACCEPTED"          # 已录用（终态）
    REJECTED = "REJECTED"          # 已拒绝（终态）
    
    @property
    def label(self) -> str:
        """邮件中展示的状态名"""
        return self.value.replace("_", " ").title()


TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.ACCEPTED,
    ApplicationStatus.REJECTED,
})

_ACTIVE_PREDICATE = "status NOT IN ('ACCEPTED', 'REJECTED')"


# ==================== 表模型 ====================

class JobApplication(SQLModelBase, TimestampMixin, IDMixin, table=True):
    """投递申请表模型"""
    __tablename__ = "job_applications"
    __table_args__ = (
        Index(
            "uq_job_applications_active_pair",
            "job_id",
            "applicant_id",
            unique=True,
            sqlite_where=text(_ACTIVE_PREDICATE),
            postgresql_where=text(_ACTIVE_PREDICATE),
        ),
    )
    
    application_no: int = Field(..., unique=True, index=True, description="申请编号")
    job_id: str = Field(..., foreign_key="job_postings.id", index=True, description="岗位ID")
    applicant_id: str = Field(..., foreign_key="registrations.id", index=True, description="求职者ID")
    submitted_by: str = Field(..., max_length=36, description="提交人（本人或代投递的管理员）")
    submitted_at: datetime = Field(default_factory=utcnow, nullable=False, description="投递时间")
    
    status: ApplicationStatus = Field(default=ApplicationStatus.APPLIED, index=True, description="申请状态")
    status_narration: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    
    # ========== 附件与说明 ==========
    resume_ref: str = Field(..., max_length=500, description="简历附件地址")
    cover_letter_ref: Optional[str] = Field(default=None, max_length=500, description="求职信附件地址")
    fit_justification: str = Field(..., sa_column=Column(Text, nullable=False), description="匹配理由")
    
    @property
    def is_terminal(self) -> bool:
        """是否已处于终态"""
        return self.status in TERMINAL_STATUSES
    
    def __repr__(self) -> str:
        return f"<JobApplication(no={self.application_no}, status={self.status})>"


class ApplicationStatusHistory(SQLModelBase, IDMixin, table=True):
    """状态流转记录（含创建），用于申请进度追踪"""
    __tablename__ = "application_status_history"
    
    application_id: str = Field(..., foreign_key="job_applications.id", index=True)
    from_status: Optional[ApplicationStatus] = Field(default=None)
    to_status: ApplicationStatus = Field(...)
    actor_id: str = Field(..., max_length=36)
    actor_role: str = Field(..., max_length=20)
    narration: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# ==================== 请求 Schema ====================

class ApplicationSubmit(SQLModelBase):
    """投递申请请求"""
    job_id: str = Field(..., description="岗位ID")
    applicant_id: str = Field(..., description="求职者ID")
    resume_ref: Optional[str] = Field(None, max_length=500, description="简历附件地址（必填）")
    cover_letter_ref: Optional[str] = Field(None, max_length=500, description="求职信附件地址")
    fit_justification: str = Field(..., min_length=20, description="匹配理由（至少20字符）")


class ApplicationTransitionRequest(SQLModelBase):
    """状态流转请求"""
    status: str = Field(..., description="目标状态（APPLIED / IN_PROGRESS / HOLD / ACCEPTED / REJECTED）")
    narration: Optional[str] = Field(None, description="流转说明")


# ==================== 响应 Schema ====================

class ApplicationResponse(TimestampResponse):
    """投递申请响应"""
    application_no: int
    job_id: str
    applicant_id: str
    submitted_by: str
    submitted_at: datetime
    status: ApplicationStatus
    status_narration: Optional[str]
    resume_ref: str
    cover_letter_ref: Optional[str]
    fit_justification: str
    
    # 关联信息（简化）
    job_title: Optional[str] = None
    applicant_name: Optional[str] = None


class ApplicationHistoryItem(SQLModelBase):
    """状态流转记录响应"""
    from_status: Optional[ApplicationStatus]
    to_status: ApplicationStatus
    actor_id: str
    actor_role: str
    narration: Optional[str]
    created_at: datetime
