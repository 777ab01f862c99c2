"""
Custom exceptions for the deployment tracker.

Registries and the tracker fail fast with one of these; the API layer maps
each family to an HTTP status code.

Exception Hierarchy:
    TrackerError (base)
    ├── NotFoundError - Referenced entity does not exist
    │   ├── UnknownService
    │   ├── UnknownVersion
    │   ├── UnknownEnvironment
    │   └── DeploymentNotFound
    ├── DuplicateEntityError - Unique constraint violated on create
    │   ├── DuplicateService
    │   ├── DuplicateVersion
    │   └── DuplicateEnvironment
    ├── InvalidTransitionError - Illegal deployment status change
    └── VerificationUnavailableError - Source control could not answer
"""

from typing import Any, Optional


class TrackerError(Exception):
    """
    Base exception for all tracker errors.

    Attributes:
        message: Human-readable error description
        entity: Optional entity kind the error relates to (e.g. "deployment")
    """

    def __init__(self, message: str, entity: Optional[str] = None):
        self.message = message
        self.entity = entity
        super().__init__(message)


class NotFoundError(TrackerError):
    """Raised when a referenced entity is absent."""

    entity_kind = "entity"

    def __init__(self, identifier: Any, message: Optional[str] = None):
        self.identifier = identifier
        if message is None:
            message = f"{self.entity_kind.capitalize()} '{identifier}' not found"
        super().__init__(message, entity=self.entity_kind)


class UnknownService(NotFoundError):
    entity_kind = "service"


class UnknownVersion(NotFoundError):
    entity_kind = "deployable version"


class UnknownEnvironment(NotFoundError):
    entity_kind = "environment"


class DeploymentNotFound(NotFoundError):
    entity_kind = "deployment"


class DuplicateEntityError(TrackerError):
    """
    Raised when a create would violate a unique constraint.

    Example:
        >>> registry.register("checkout-api")
        >>> registry.register("checkout-api")
        DuplicateService: Service 'checkout-api' already exists
    """

    entity_kind = "entity"

    def __init__(self, key: Any):
        self.key = key
        super().__init__(
            f"{self.entity_kind.capitalize()} '{key}' already exists",
            entity=self.entity_kind
        )


class DuplicateService(DuplicateEntityError):
    entity_kind = "service"


class DuplicateVersion(DuplicateEntityError):
    entity_kind = "deployable version"


class DuplicateEnvironment(DuplicateEntityError):
    entity_kind = "environment"


class InvalidTransitionError(TrackerError):
    """
    Raised when a deployment status change is not a legal forward move.

    Covers moves out of a terminal status, backwards or same-status moves,
    and writes that lost a race against a concurrent transition.

    Attributes:
        deployment_id: The deployment being advanced
        current_status: Status the deployment was in
        requested_status: Status the caller asked for
    """

    def __init__(
        self,
        deployment_id: int,
        current_status: str,
        requested_status: str,
        reason: Optional[str] = None
    ):
        self.deployment_id = deployment_id
        self.current_status = current_status
        self.requested_status = requested_status

        message = (
            f"Cannot move deployment {deployment_id} "
            f"from {current_status} to {requested_status}"
        )
        if reason:
            message += f": {reason}"
        super().__init__(message, entity="deployment")


class VerificationUnavailableError(TrackerError):
    """
    Raised where a caller must tell "source control did not answer" apart
    from a negative answer.

    Verifier operations that return plain booleans never raise this; they
    fold the unavailable case into False.
    """

    def __init__(self, repository: str, ref: str):
        self.repository = repository
        self.ref = ref
        super().__init__(
            f"Could not resolve '{ref}' in repository '{repository}'",
            entity="commit"
        )
