# app/core/config.py - Centralized settings management using Pydantic
from pydantic import Field, validator
from pydantic_settings import BaseSettings, NoDecode
from typing import Annotated, List, Optional


class Settings(BaseSettings):
    """Application settings with validation and type safety"""

    # Application Environment
    ENV: str = Field(default="dev", description="Environment: dev, test, staging, prod")
    DEBUG: bool = Field(default=False, description="Debug mode")
    API_TITLE: str = Field(default="School Portal API", description="API title")
    API_VERSION: str = Field(default="1.0.0", description="API version")

    # Database Configuration
    DATABASE_URL: str = Field(default="sqlite:///./school_portal.db", description="Database connection URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL queries")
    DATABASE_POOL_SIZE: int = Field(default=5, ge=1, le=100, description="Connection pool size")
    DATABASE_MAX_OVERFLOW: int = Field(default=10, ge=0, le=100, description="Max overflow connections")
    DATABASE_POOL_TIMEOUT: int = Field(default=30, ge=1, le=300, description="Pool timeout in seconds")
    DATABASE_POOL_RECYCLE: int = Field(default=3600, ge=300, description="Pool recycle time in seconds")

    # JWT Configuration
    JWT_SECRET: str = Field(..., min_length=32, description="JWT signing secret")
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60, ge=1, le=10080, description="Access token expiry")
    JWT_ISSUER: str = Field(default="school-portal", description="JWT issuer")
    JWT_AUDIENCE: str = Field(default="school-portal-users", description="JWT audience")

    # CORS Configuration
    # NoDecode leaves comma-separated env values to parse_cors_origins
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",  # Vite dev server
            "http://127.0.0.1:5173"
        ],
        description="CORS allowed origins"
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True, description="Allow CORS credentials")

    # Security Configuration
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=15, description="BCrypt rounds")
    PASSWORD_MIN_LENGTH: int = Field(default=8, ge=6, le=128, description="Minimum password length")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="detailed", description="Log format: simple, detailed")

    # Cache Configuration
    CACHE_DEFAULT_TIMEOUT: int = Field(default=300, ge=1, description="Default cache timeout in seconds")
    CACHE_MAX_ENTRIES: int = Field(default=1024, ge=16, description="Max cached entries before eviction")

    # Pagination
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1, le=500, description="Default page size")
    MAX_PAGE_SIZE: int = Field(default=100, ge=1, le=1000, description="Max page size")

    # Grading defaults
    SCORE_CA_MAX: float = Field(default=10, ge=0, description="Maximum continuous assessment score")
    SCORE_TEST_MAX: float = Field(default=20, ge=0, description="Maximum test score")
    SCORE_EXAM_MAX: float = Field(default=70, ge=0, description="Maximum exam score")
    PASS_MARK: float = Field(default=40, ge=0, le=100, description="Pass mark percentage")
    CURRENT_SESSION: str = Field(default="2024/2025", description="Active academic session")
    CURRENT_TERM: str = Field(default="1st Term", description="Active academic term")

    # Seeding
    FIRST_ADMIN_EMAIL: str = Field(default="admin@school.com", description="Seeded admin email")
    FIRST_ADMIN_PASSWORD: Optional[str] = Field(default=None, description="Seeded admin password")
    FIRST_ADMIN_NAME: str = Field(default="School Administrator", description="Seeded admin name")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra environment variables

    @validator("ENV")
    def validate_environment(cls, v):
        allowed_envs = ["dev", "development", "test", "staging", "prod", "production"]
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENV must be one of: {allowed_envs}")
        return v.lower()

    @validator("JWT_SECRET")
    def validate_jwt_secret(cls, v, values):
        if values.get("ENV") in ["prod", "production"] and v.startswith("change_me"):
            raise ValueError("JWT_SECRET must be changed in production")
        if len(v) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters long")
        return v

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        allowed_prefixes = (
            "postgresql://",
            "postgresql+psycopg://",
            "sqlite://",
        )
        if not v.startswith(allowed_prefixes):
            raise ValueError("DATABASE_URL must be a postgresql, postgresql+psycopg or sqlite connection string")
        return v

    @validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed_levels}")
        return v.upper()

    @validator("LOG_FORMAT")
    def validate_log_format(cls, v):
        if v.lower() not in ("simple", "detailed"):
            raise ValueError("LOG_FORMAT must be simple or detailed")
        return v.lower()

    @validator("CORS_ORIGINS", pre=True)
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Handle comma-separated string
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @validator("MAX_PAGE_SIZE")
    def validate_max_page_size(cls, v, values):
        default = values.get("DEFAULT_PAGE_SIZE")
        if default and v < default:
            raise ValueError("MAX_PAGE_SIZE must not be smaller than DEFAULT_PAGE_SIZE")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.ENV in ["dev", "development"]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.ENV in ["prod", "production"]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def default_total_score(self) -> float:
        return self.SCORE_CA_MAX + self.SCORE_TEST_MAX + self.SCORE_EXAM_MAX


# Create settings instance with validation
try:
    settings = Settings()
except Exception as e:
    print(f"Configuration error: {e}")
    print("Please check your .env file and environment variables")
    raise


__all__ = ["settings", "Settings"]
