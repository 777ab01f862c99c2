from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./deploy_tracker.db"
    
    # Credential Encryption (Fernet master key, environment tokens are encrypted at rest)
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    ENCRYPTION_KEY: str = "your-fernet-key-here-generate-new-one"
    
    # Source control (GitHub). Anonymous access when login or token is empty.
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_LOGIN: str = ""
    GITHUB_OAUTH_TOKEN: str = ""
    SCM_TIMEOUT_SECONDS: float = 10.0
    
    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"
    
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8081
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
