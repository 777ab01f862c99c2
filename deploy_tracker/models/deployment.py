from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from deploy_tracker.core.transitions import DeploymentStatus
from deploy_tracker.models.database import Base


def utcnow() -> datetime:
    """Naive UTC now, truncated to the second like the stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class Deployment(Base):
    __tablename__ = "deployment"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    environment_id = Column(
        Integer,
        ForeignKey("environment.id", name="deployment_environment_fk"),
        nullable=False
    )
    service_id = Column(
        Integer,
        ForeignKey("service.id", name="deployment_service_fk"),
        nullable=False
    )
    deployable_version_id = Column(
        Integer,
        ForeignKey("deployable_version.id", name="deployment_deployable_version_fk"),
        nullable=False
    )
    user_email = Column(String(1000), nullable=False)
    status = Column(
        Enum(DeploymentStatus, native_enum=False, length=32),
        nullable=False,
        default=DeploymentStatus.PENDING
    )
    source_version = Column(String(1000), nullable=False, default="")
    started_at = Column(DateTime, nullable=False, default=utcnow)
    last_update = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    # Bumped on every UPDATE; a stale writer gets StaleDataError instead of
    # silently overwriting a concurrent status change.
    version_counter = Column(Integer, nullable=False)
    
    # Relationships
    environment = relationship("Environment", back_populates="deployments")
    service = relationship("Service", back_populates="deployments")
    deployable_version = relationship("DeployableVersion", back_populates="deployments")

    __mapper_args__ = {"version_id_col": version_counter}

    def __repr__(self):
        return (
            f"<Deployment id={self.id} environment_id={self.environment_id} "
            f"service_id={self.service_id} status={self.status}>"
        )
