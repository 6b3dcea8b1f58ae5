from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "project-gateway-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Project Gateway")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/gateway_dev")
    submission_store: str = os.getenv("SUBMISSION_STORE", "sql")  # sql|memory
    file_storage: str = os.getenv("FILE_STORAGE", "object")  # object|inline
    max_files: int = int(os.getenv("MAX_FILES", "5"))

    s3_endpoint: str = os.getenv("S3_ENDPOINT", "http://minio:9000")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    s3_bucket_uploads: str = os.getenv("S3_BUCKET_UPLOADS", "gateway-uploads-dev")
    # Base for the retrieval URL stored on each attachment; defaults to the endpoint
    s3_public_base_url: str = os.getenv("S3_PUBLIC_BASE_URL", os.getenv("S3_ENDPOINT", "http://minio:9000"))

    # SMTP relay; email is skipped (logged only) unless host, user, pass and sender are all set
    smtp_host: str = os.getenv("SMTP_HOST", "")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_user: str = os.getenv("SMTP_USER", "")
    smtp_pass: str = os.getenv("SMTP_PASS", "")
    smtp_secure: bool = os.getenv("SMTP_SECURE", "false") == "true"  # implicit TLS, port 465
    smtp_timeout_seconds: int = int(os.getenv("SMTP_TIMEOUT_SECONDS", "15"))
    email_from: str = os.getenv("EMAIL_FROM", "")
    admin_email: str = os.getenv("ADMIN_EMAIL", "")
    admin_base_url: str = os.getenv("ADMIN_BASE_URL", "http://localhost:3000")

    # Admin credential: bcrypt hash preferred, plain secret accepted for dev
    admin_password: str = os.getenv("ADMIN_PASSWORD", "")
    admin_password_hash: str = os.getenv("ADMIN_PASSWORD_HASH", "")

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_pass and self.email_from)

settings = Settings()
