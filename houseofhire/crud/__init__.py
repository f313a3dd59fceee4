"""
CRUD 操作模块
"""
from .job import job_crud
from .registration import registration_crud
from .application import application_crud
from .interview import interview_crud
from .assessment import assessment_type_crud, assessment_crud

__all__ = [
    "job_crud",
    "registration_crud",
    "application_crud",
    "interview_crud",
    "assessment_type_crud",
    "assessment_crud",
]
