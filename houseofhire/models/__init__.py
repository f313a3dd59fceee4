"""
SQLModel 模型模块

使用 SQLModel 统一 ORM Model 和 Pydantic Schema
"""
from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse
from .job import JobPosting, JobPostingCreate, JobPostingResponse, JobStatus
from .registration import (
    Registration, RegistrationCreate, AdminRegistrationCreate, RegistrationResponse,
    DecisionRequest, DeactivateRequest, AccountType,
)
from .application import (
    JobApplication, ApplicationStatusHistory, ApplicationSubmit, ApplicationTransitionRequest,
    ApplicationResponse, ApplicationHistoryItem, ApplicationStatus, TERMINAL_STATUSES,
)
from .assessment import (
    AssessmentType, Assessment, AssessmentTypeCreate, AssessmentCreate,
    AssessmentTypeResponse, AssessmentResponse, MIN_SCORE, MAX_SCORE,
)
from .interview import (
    InterviewSession, InterviewScheduleRequest, RoundCloseRequest,
    InterviewSessionResponse, RoundStatus, RoundOutcome,
)

__all__ = [
    # Base
    "SQLModelBase",
    "TimestampMixin",
    "IDMixin",
    "TimestampResponse",
    # Job
    "JobPosting",
    "JobPostingCreate",
    "JobPostingResponse",
    "JobStatus",
    # Registration
    "Registration",
    "RegistrationCreate",
    "AdminRegistrationCreate",
    "RegistrationResponse",
    "DecisionRequest",
    "DeactivateRequest",
    "AccountType",
    # Application
    "JobApplication",
    "ApplicationStatusHistory",
    "ApplicationSubmit",
    "ApplicationTransitionRequest",
    "ApplicationResponse",
    "ApplicationHistoryItem",
    "ApplicationStatus",
    "TERMINAL_STATUSES",
    # Assessment
    "AssessmentType",
    "Assessment",
    "AssessmentTypeCreate",
    "AssessmentCreate",
    "AssessmentTypeResponse",
    "AssessmentResponse",
    "MIN_SCORE",
    "MAX_SCORE",
    # Interview
    "InterviewSession",
    "InterviewScheduleRequest",
    "RoundCloseRequest",
    "InterviewSessionResponse",
    "RoundStatus",
    "RoundOutcome",
]
