"""
Deployment status state machine.

    PENDING -> IN_PROGRESS -> {DONE, FAILED, CANCELED}

A pending deployment may also be failed or canceled before it starts.
DONE, FAILED and CANCELED are terminal.
"""

import enum


class DeploymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    FAILED = "FAILED"
    CANCELED = "CANCELED"


TERMINAL_STATUSES = frozenset({
    DeploymentStatus.DONE,
    DeploymentStatus.FAILED,
    DeploymentStatus.CANCELED,
})

ALLOWED_TRANSITIONS = {
    DeploymentStatus.PENDING: frozenset({
        DeploymentStatus.IN_PROGRESS,
        DeploymentStatus.FAILED,
        DeploymentStatus.CANCELED,
    }),
    DeploymentStatus.IN_PROGRESS: frozenset({
        DeploymentStatus.DONE,
        DeploymentStatus.FAILED,
        DeploymentStatus.CANCELED,
    }),
}


def is_terminal(status: DeploymentStatus) -> bool:
    return DeploymentStatus(status) in TERMINAL_STATUSES


def can_transition(current: DeploymentStatus, new: DeploymentStatus) -> bool:
    """True if moving from current to new is a legal forward step."""
    current = DeploymentStatus(current)
    new = DeploymentStatus(new)
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())
