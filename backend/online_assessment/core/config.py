from functools import lru_cache

from pydantic import EmailStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='forbid',
    )

    DATABASE_URL: str
    JWT_SECRET_KEY: str
    APP_ENV: str = 'development'
    CORS_ORIGINS: str = 'http://localhost:3000'
    FIRST_ADMIN_EMAIL: EmailStr
    FIRST_ADMIN_PASSWORD: str
    LOG_LEVEL: str = 'INFO'

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_ALGORITHM: str = 'HS256'

    # Attempt timing. When not enforced the client owns the countdown.
    ENFORCE_ATTEMPT_DURATION: bool = False
    ATTEMPT_GRACE_SECONDS: int = 60

    LEADERBOARD_SIZE: int = 10

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, value: str) -> str:
        if not value.startswith(('postgresql', 'sqlite')):
            raise ValueError('DATABASE_URL must point to PostgreSQL (or SQLite for local tests)')
        return value

    @field_validator('JWT_SECRET_KEY')
    @classmethod
    def validate_jwt_secret_strength(cls, value: str) -> str:
        if len(value) < 32:
            raise ValueError('JWT secret must be at least 32 characters')
        return value

    @field_validator('FIRST_ADMIN_PASSWORD')
    @classmethod
    def validate_first_admin_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError('FIRST_ADMIN_PASSWORD must be at least 8 characters')
        if len(value) > 128:
            raise ValueError('FIRST_ADMIN_PASSWORD must be at most 128 characters')
        return value

    @field_validator('FIRST_ADMIN_EMAIL')
    @classmethod
    def normalize_first_admin_email(cls, value: EmailStr) -> EmailStr:
        return str(value).strip().lower()

    @field_validator('LOG_LEVEL')
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator('ATTEMPT_GRACE_SECONDS', 'LEADERBOARD_SIZE')
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError('must not be negative')
        return value

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.CORS_ORIGINS.split(',') if item.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
