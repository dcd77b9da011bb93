"""The agent loop and its system directive."""

from .directive import RoleFocus, build_system_directive, build_task_prompt, classify_role
from .driver import MAX_ROUNDS, ConversationDriver, DriverState, execute_task

__all__ = [
    "RoleFocus",
    "build_system_directive",
    "build_task_prompt",
    "classify_role",
    "MAX_ROUNDS",
    "ConversationDriver",
    "DriverState",
    "execute_task",
]
