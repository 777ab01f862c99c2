"""
Core abstractions for the deployment tracker.

Modules:
    protocols: Interface definitions (SourceControlVerifier)
    exceptions: Error taxonomy shared by registries, tracker and API
    transitions: Deployment status state machine
"""

from .protocols import SourceControlVerifier
from .transitions import DeploymentStatus, TERMINAL_STATUSES, can_transition
from .exceptions import (
    TrackerError,
    NotFoundError,
    UnknownService,
    UnknownVersion,
    UnknownEnvironment,
    DeploymentNotFound,
    DuplicateEntityError,
    DuplicateService,
    DuplicateVersion,
    DuplicateEnvironment,
    InvalidTransitionError,
    VerificationUnavailableError,
)

__all__ = [
    # Protocols
    "SourceControlVerifier",
    # State machine
    "DeploymentStatus",
    "TERMINAL_STATUSES",
    "can_transition",
    # Exceptions
    "TrackerError",
    "NotFoundError",
    "UnknownService",
    "UnknownVersion",
    "UnknownEnvironment",
    "DeploymentNotFound",
    "DuplicateEntityError",
    "DuplicateService",
    "DuplicateVersion",
    "DuplicateEnvironment",
    "InvalidTransitionError",
    "VerificationUnavailableError",
]
