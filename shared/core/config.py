import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Either a full DATABASE_URL or the individual postgres parts
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DB_USER: Optional[str] = os.getenv("DB_USER")
    DB_PASS: Optional[str] = os.getenv("DB_PASS")
    DB_HOST: Optional[str] = os.getenv("DB_HOST")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    LEASING_DB_NAME: str = os.getenv("LEASING_DB_NAME", "leasing")
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "require")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: list[str] = ["http://localhost:8080"]

    # Rate governance policy
    RATE_ALLOW_SELF_APPROVAL: bool = True
    RATE_REJECTION_REQUIRES_COMMENT: bool = False
    DEFAULT_STANDARD_INCREASE_PERCENTAGE: float = 10.0
    DEFAULT_INCREASE_INTERVAL_YEARS: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def build_database_url(config: Settings = settings) -> str:
    if config.DATABASE_URL:
        return config.DATABASE_URL
    if config.DB_HOST:
        return (
            f"postgresql+psycopg2://{config.DB_USER}:{config.DB_PASS}@{config.DB_HOST}:{config.DB_PORT}"
            f"/{config.LEASING_DB_NAME}?sslmode={config.DB_SSLMODE}"
        )
    # local development fallback
    return f"sqlite:///{os.path.join(BASE_DIR, 'leasing.db')}"


LEASING_DATABASE_URL = build_database_url()
