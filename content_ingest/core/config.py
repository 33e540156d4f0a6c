"""
Configuration management using Pydantic Settings.
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    log_level: str = "INFO"
    environment: str = "development"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_title: str = "Curriculum Bulk Upload API"
    api_version: str = "1.0.0"
    api_description: str = "FastAPI service for bulk-loading bilingual chapters, MCQs and revision notes"

    # Storage Configuration
    storage_backend: str = "memory"  # "memory" or "dynamodb"

    # AWS Configuration
    aws_region: str = "ap-south-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None

    # DynamoDB Configuration
    dynamodb_endpoint_url: Optional[str] = None
    dynamodb_table_prefix: str = "curriculum_"

    # Upload Configuration
    report_items_limit: int = 10
    max_upload_bytes: int = 10 * 1024 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
