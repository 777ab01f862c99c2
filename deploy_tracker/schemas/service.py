from pydantic import BaseModel, ConfigDict, Field

class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=1000)

class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    name: str
