from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from deploy_tracker.models.database import Base

class Service(Base):
    __tablename__ = "service"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(1000), unique=True, nullable=False)
    
    # Relationships
    versions = relationship("DeployableVersion", back_populates="service")
    deployments = relationship("Deployment", back_populates="service")

    def __repr__(self):
        return f"<Service id={self.id} name={self.name!r}>"
