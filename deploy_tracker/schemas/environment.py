from pydantic import BaseModel, ConfigDict, Field, SecretStr

class EnvironmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=1000)
    geo_region: str = Field(..., min_length=1, max_length=100)
    availability: str = Field(..., min_length=1, max_length=100)
    kubernetes_master: str = Field(..., min_length=1, max_length=1000)
    # SecretStr keeps the token out of repr() and validation error output
    kubernetes_token: SecretStr = Field(..., min_length=1, max_length=1000)

class EnvironmentResponse(BaseModel):
    """Environment as exposed over the API. The cluster token is never included."""
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    name: str
    geo_region: str
    availability: str
    kubernetes_master: str
    has_credential: bool
