"""
Configuration management for the DocAI document chat service
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Configuration
    app_name: str = "DocAI Document Chat"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Security Configuration
    allowed_hosts: str = "*"
    cors_origins: str = "*"

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "structured"
    log_file: Optional[str] = None

    # Object Store Configuration (S3)
    s3_bucket: Optional[str] = None
    s3_region: str = "us-east-1"
    s3_key_prefix: str = "documents"
    s3_endpoint_url: Optional[str] = None
    s3_public_base_url: Optional[str] = None
    s3_public_read: bool = True
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    storage_connect_timeout_seconds: float = 10.0
    storage_read_timeout_seconds: float = 60.0

    # Generative AI Configuration (Gemini)
    gemini_api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_model: str = "gemini-1.5-flash"
    gemini_temperature: float = 0.1
    gemini_file_poll_interval_seconds: float = 1.0
    gemini_file_active_timeout_seconds: float = 60.0
    gemini_delete_remote_files: bool = True

    # Pipeline Configuration
    scratch_directory: Optional[str] = None
    max_file_size_mb: int = 50
    cleanup_orphaned_documents: bool = True
    canned_responses_whole_word: bool = False

    # Performance Configuration
    request_timeout_seconds: int = 120

    # Boundary Configuration
    chat_failure_status_code: int = 500


# Global settings instance
settings = Settings()
