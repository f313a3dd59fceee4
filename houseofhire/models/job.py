"""
岗位模型模块

岗位本身不属于生命周期引擎，但投递时需要校验岗位状态与截止日期，
通知邮件也需要岗位名称和公司名称
"""
from datetime import date
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Text

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class JobStatus(str, Enum):
    """岗位状态"""
    OPEN = "OPEN"
    CLOSED = "CLOSED"


# ==================== 基础字段定义 ====================

class JobPostingBase(SQLModelBase):
    """岗位基础字段"""
    title: str = Field(..., min_length=1, max_length=150, index=True, description="岗位名称")
    company_name: str = Field(..., min_length=1, max_length=150, description="公司名称")
    location: Optional[str] = Field(None, max_length=150, description="工作地点")
    salary: Optional[str] = Field(None, max_length=100, description="薪资说明")
    deadline: date = Field(..., description="投递截止日期")


# ==================== 表模型 ====================

class JobPosting(JobPostingBase, TimestampMixin, IDMixin, table=True):
    """岗位表模型"""
    __tablename__ = "job_postings"
    
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True), description="岗位描述")
    recruiter_id: Optional[str] = Field(default=None, foreign_key="registrations.id", index=True, description="发布招聘方")
    status: JobStatus = Field(default=JobStatus.OPEN, index=True, description="岗位状态")
    
    def is_expired(self, today: Optional[date] = None) -> bool:
        """截止日期早于今天即视为过期（截止当天仍可投递）"""
        return self.deadline < (today or date.today())
    
    def __repr__(self) -> str:
        return f"<JobPosting(id={self.id}, title={self.title}, status={self.status})>"


# ==================== 请求 Schema ====================

class JobPostingCreate(JobPostingBase):
    """创建岗位请求"""
    description: Optional[str] = None
    recruiter_id: Optional[str] = Field(None, description="管理员代发布时指定的招聘方ID")


# ==================== 响应 Schema ====================

class JobPostingResponse(TimestampResponse):
    """岗位响应"""
    title: str
    company_name: str
    location: Optional[str]
    salary: Optional[str]
    description: Optional[str]
    deadline: date
    recruiter_id: Optional[str]
    status: JobStatus
