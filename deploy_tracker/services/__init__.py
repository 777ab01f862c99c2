from deploy_tracker.services.service_registry import ServiceRegistry
from deploy_tracker.services.version_registry import VersionRegistry
from deploy_tracker.services.environment_registry import EnvironmentRegistry
from deploy_tracker.services.deployment_tracker import DeploymentTracker

__all__ = ["ServiceRegistry", "VersionRegistry", "EnvironmentRegistry", "DeploymentTracker"]
