import os
import boto3


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self):
        self.USE_SSM = _env_bool("USE_SSM")
        self.SSM_PREFIX = os.getenv("SSM_PREFIX", "")
        self.SSM_REGION = os.getenv("SSM_REGION", os.getenv("S3_REGION", "us-east-1"))

        if self.USE_SSM:
            ssm = boto3.client('ssm', region_name=self.SSM_REGION)
            self.DATABASE_URL = self.get_parameter(ssm, "DATABASE_URL")
            self.S3_ACCESS_KEY_ID = self.get_parameter(ssm, "S3_ACCESS_KEY_ID")
            self.S3_SECRET_ACCESS_KEY = self.get_parameter(ssm, "S3_SECRET_ACCESS_KEY")
        else:
            self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./media.db")
            self.S3_ACCESS_KEY_ID = os.getenv("S3_ACCESS_KEY_ID", "")
            self.S3_SECRET_ACCESS_KEY = os.getenv("S3_SECRET_ACCESS_KEY", "")

        self.S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL", "http://localhost:9000").rstrip("/")
        self.S3_REGION = os.getenv("S3_REGION", "us-east-1")
        self.S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME", "media")
        self.S3_PUBLIC_BASE_URL = os.getenv("S3_PUBLIC_BASE_URL", self.S3_ENDPOINT_URL).rstrip("/")

        self.PRESIGNED_URL_EXPIRATION = int(os.getenv("PRESIGNED_URL_EXPIRATION", 360))
        self.MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", 10))

        self.UPLOAD_RATE_LIMIT = os.getenv("UPLOAD_RATE_LIMIT", "30/minute")
        self.RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", "true")
        self.CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

        self.REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        # The sweep must never race an upload that still holds a valid presigned URL
        self.ORPHAN_SWEEP_GRACE_SECONDS = max(
            int(os.getenv("ORPHAN_SWEEP_GRACE_SECONDS", 3600)),
            self.PRESIGNED_URL_EXPIRATION,
        )

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    def get_parameter(self, ssm, name):
        return ssm.get_parameter(Name=f"{self.SSM_PREFIX}{name}", WithDecryption=True)['Parameter']['Value']

    @property
    def cors_origins_list(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

settings = Settings()
