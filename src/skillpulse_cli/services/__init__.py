"""Services module for SkillPulse CLI - Business logic layer."""

from .auth_service import AuthService
from .session_gate import SessionGate, SessionState
from .task_list import TaskListController
from .task_service import TaskService

__all__ = [
    "AuthService",
    "SessionGate",
    "SessionState",
    "TaskListController",
    "TaskService",
]
