"""
面试评估模型模块

评估项字典（AssessmentType）由管理员维护；
评估记录以 (面试ID, 评估项ID) 为联合主键，写入后不可修改
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import CheckConstraint
from sqlmodel import Field, Column, Text

from .base import SQLModelBase, TimestampMixin, utcnow

MIN_SCORE = 0
MAX_SCORE = 5


# ==================== 表模型 ====================

class AssessmentType(SQLModelBase, TimestampMixin, table=True):
    """评估项字典表"""
    __tablename__ = "assessment_types"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(..., max_length=100, unique=True, index=True)


class Assessment(SQLModelBase, table=True):
    """面试评估记录表"""
    __tablename__ = "assessments"
    __table_args__ = (
        CheckConstraint(f"score >= {MIN_SCORE} AND score <= {MAX_SCORE}", name="ck_assessment_score_range"),
    )
    
    interview_id: str = Field(..., foreign_key="interview_sessions.id", primary_key=True)
    assessment_type_id: int = Field(..., foreign_key="assessment_types.id", primary_key=True)
    narration: str = Field(..., sa_column=Column(Text, nullable=False))
    score: int = Field(...)
    recorded_by: str = Field(..., max_length=36)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# ==================== 请求 Schema ====================

class AssessmentTypeCreate(SQLModelBase):
    """创建/重命名评估项请求"""
    name: str = Field(..., min_length=1, max_length=100)


class AssessmentCreate(SQLModelBase):
    """记录评估请求（分数范围由业务层校验）"""
    assessment_type_id: int = Field(..., description="评估项ID")
    narration: Optional[str] = Field(None, description="评估说明（必填）")
    score: int = Field(..., description="评分 0-5")


# ==================== 响应 Schema ====================

class AssessmentTypeResponse(SQLModelBase):
    """评估项响应"""
    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class AssessmentResponse(SQLModelBase):
    """评估记录响应"""
    interview_id: str
    assessment_type_id: int
    assessment_name: Optional[str] = None
    narration: str
    score: int
    recorded_by: str
    created_at: datetime
