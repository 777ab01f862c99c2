from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from deploy_tracker.models.database import Base

class Environment(Base):
    """
    A deployment target.

    kubernetes_token holds the Fernet ciphertext of the cluster credential
    (see deploy_tracker.utils.credentials); it is left out of __repr__ so it never
    reaches a log line.
    """
    __tablename__ = "environment"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(1000), unique=True, nullable=False)
    geo_region = Column(String(100), nullable=False)
    availability = Column(String(100), nullable=False)
    kubernetes_master = Column(String(1000), nullable=False)
    # Ciphertext runs ~1.4x the credential length
    kubernetes_token = Column(Text, nullable=False)
    
    # Relationships
    deployments = relationship("Deployment", back_populates="environment")

    @property
    def has_credential(self) -> bool:
        return bool(self.kubernetes_token)

    def __repr__(self):
        return (
            f"<Environment id={self.id} name={self.name!r} "
            f"geo_region={self.geo_region!r} availability={self.availability!r}>"
        )
