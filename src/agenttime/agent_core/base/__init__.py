from .base import Completion, ModelProvider, StopReason

__all__ = ["Completion", "ModelProvider", "StopReason"]
