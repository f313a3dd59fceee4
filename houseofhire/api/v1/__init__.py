"""
API v1 路由模块
"""
from . import jobs, registrations, applications, interviews, assessment_types

__all__ = [
    "jobs",
    "registrations",
    "applications",
    "interviews",
    "assessment_types",
]
