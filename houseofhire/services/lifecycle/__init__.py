# -*- coding: utf-8 -*-
"""
申请与面试生命周期服务包。
"""

from .permissions import Actor, ActorRole, require_role, require_admin
from .application_state import ALLOWED_TRANSITIONS, ApplicationStateMachine, check_transition
from .interview_rounds import InterviewRoundEngine
from .registration import RegistrationWorkflow
from .orchestrator import LifecycleOrchestrator, LifecycleResult

__all__ = [
    "Actor",
    "ActorRole",
    "require_role",
    "require_admin",
    "ALLOWED_TRANSITIONS",
    "ApplicationStateMachine",
    "check_transition",
    "InterviewRoundEngine",
    "RegistrationWorkflow",
    "LifecycleOrchestrator",
    "LifecycleResult",
]
