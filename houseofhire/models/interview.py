"""
面试轮次模型模块

每一轮面试一条记录：安排时为 SCHEDULED，结束时写入结果和结束说明。
轮次序列属于一条申请：同一申请下轮次号严格递增，数据库唯一约束兜底；
申请被拒绝后重新投递会得到新的申请，轮次从 1 重新开始
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Column, Text

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse
from .assessment import AssessmentResponse


class RoundStatus(str, Enum):
    """面试轮次状态"""
    SCHEDULED = "SCHEDULED"
    REJECTED = "REJECTED"
    PROCEED_NEXT_ROUND = "PROCEED_NEXT_ROUND"
    PROCEED_TO_RECRUITER = "PROCEED_TO_RECRUITER"
    ACCEPTED_BY_RECRUITER = "ACCEPTED_BY_RECRUITER"


class RoundOutcome(str, Enum):
    """面试结束时可选的结果"""
    REJECTED = "REJECTED"
    PROCEED_NEXT_ROUND = "PROCEED_NEXT_ROUND"
    PROCEED_TO_RECRUITER = "PROCEED_TO_RECRUITER"
    ACCEPTED_BY_RECRUITER = "ACCEPTED_BY_RECRUITER"


# ==================== 表模型 ====================

class InterviewSession(SQLModelBase, TimestampMixin, IDMixin, table=True):
    """面试轮次表模型"""
    __tablename__ = "interview_sessions"
    __table_args__ = (
        UniqueConstraint("application_id", "round_number", name="uq_interview_round"),
    )
    
    # ========== 外键关联 ==========
    job_id: str = Field(..., foreign_key="job_postings.id", index=True)
    applicant_id: str = Field(..., foreign_key="registrations.id", index=True)
    application_id: str = Field(..., foreign_key="job_applications.id", index=True)
    
    # ========== 安排信息 ==========
    round_number: int = Field(..., ge=1, description="面试轮次")
    interviewer_name: str = Field(..., max_length=150, description="面试官")
    scheduled_at: datetime = Field(..., description="面试时间")
    header_narration: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    scheduled_by: str = Field(..., max_length=36)
    
    # ========== 结束信息 ==========
    status: RoundStatus = Field(default=RoundStatus.SCHEDULED, index=True)
    closing_narration: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    closed_by: Optional[str] = Field(default=None, max_length=36)
    closed_at: Optional[datetime] = Field(default=None)
    
    @property
    def is_closed(self) -> bool:
        return self.status != RoundStatus.SCHEDULED
    
    @property
    def permits_next_round(self) -> bool:
        """已结束且结果不是 REJECTED 才能安排下一轮"""
        return self.is_closed and self.status != RoundStatus.REJECTED
    
    def __repr__(self) -> str:
        return f"<InterviewSession(id={self.id}, round={self.round_number}, status={self.status})>"


# ==================== 请求 Schema ====================

class InterviewScheduleRequest(SQLModelBase):
    """安排面试请求"""
    job_id: str = Field(..., description="岗位ID")
    applicant_id: str = Field(..., description="求职者ID")
    round_number: int = Field(..., ge=1, description="面试轮次")
    interviewer_name: str = Field(..., min_length=1, max_length=150, description="面试官")
    scheduled_at: datetime = Field(..., description="面试时间")
    header_narration: Optional[str] = Field(None, description="面试说明")


class RoundCloseRequest(SQLModelBase):
    """结束面试请求"""
    outcome: RoundOutcome = Field(..., description="面试结果")
    closing_narration: Optional[str] = Field(None, description="结束说明")


# ==================== 响应 Schema ====================

class InterviewSessionResponse(TimestampResponse):
    """面试轮次响应"""
    job_id: str
    applicant_id: str
    application_id: str
    round_number: int
    interviewer_name: str
    scheduled_at: datetime
    header_narration: Optional[str]
    scheduled_by: str
    status: RoundStatus
    closing_narration: Optional[str]
    closed_by: Optional[str]
    closed_at: Optional[datetime]
    
    assessments: List[AssessmentResponse] = []
    total_score: int = 0
    average_score: Optional[float] = None
