from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None
    aws_access_key_id: str = "test"
    aws_secret_access_key: str = "test"

    s3_bucket: str = "image-gallery-bucket"
    s3_object_acl: Optional[str] = None
    # Serve locations from here instead of the S3 virtual-hosted URL (LocalStack, CDN)
    public_base_url: Optional[str] = None

    images_table: str = "image_info"
    users_table: str = "users"
    create_resources: bool = True

    session_secret: str = "change-me-session"
    jwt_secret: str = "change-me-jwt"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    auth_required: bool = True
    max_upload_files: int = 10
    # Point at the front end login page, e.g. /login.html
    logout_redirect_url: str = "/"

    app_title: str = "Image Gallery"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow",  # tolerate unknown vars if needed
    )

settings = Settings()
