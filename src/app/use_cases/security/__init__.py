"""
Security Use Cases

Credential and second-factor changes that end every session.
"""

from .security_orchestrator import SecurityOrchestrator
from .dtos import ForceLogoutResponse

__all__ = [
    "SecurityOrchestrator",
    "ForceLogoutResponse",
]
