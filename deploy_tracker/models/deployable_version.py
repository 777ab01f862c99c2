from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from deploy_tracker.models.database import Base

class DeployableVersion(Base):
    """An immutable (service, commit) pair that can be deployed."""
    __tablename__ = "deployable_version"
    __table_args__ = (
        UniqueConstraint('service_id', 'git_commit_sha', name='deployable_version_pair'),
    )
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    git_commit_sha = Column(String(1000), nullable=False)
    github_repository_url = Column(String(1000), nullable=False)
    service_id = Column(
        Integer,
        ForeignKey("service.id", name="deployable_version_service_fk"),
        nullable=False
    )
    
    # Relationships
    service = relationship("Service", back_populates="versions")
    deployments = relationship("Deployment", back_populates="deployable_version")

    def __repr__(self):
        return (
            f"<DeployableVersion id={self.id} service_id={self.service_id} "
            f"sha={self.git_commit_sha!r}>"
        )
