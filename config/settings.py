# config/settings.py
import os
import sys
from typing import Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment


if os.getenv("STAGE", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    STAGE: str = Field(default=Environment.DEV.value, validation_alias="STAGE")
    HOST: str = Field(default="0.0.0.0", validation_alias="HOST")
    PORT: int = Field(default=8080, validation_alias="PORT")
    API_KEY: Optional[str] = Field(default=None, validation_alias="API_KEY")

    # Object storage
    BUCKET_NAME: str = Field(default="failure-uploads", validation_alias="BUCKET_NAME")
    AWS_REGION: str = Field(default="us-east-1", validation_alias="AWS_REGION")
    S3_ENDPOINT_URL: Optional[str] = Field(
        default=None, validation_alias="S3_ENDPOINT_URL"
    )
    PRESIGN_TTL_SECONDS: int = Field(
        default=900, gt=0, validation_alias="PRESIGN_TTL_SECONDS"
    )
    EXISTENCE_CHECK_CONCURRENCY: int = Field(
        default=8, ge=1, validation_alias="EXISTENCE_CHECK_CONCURRENCY"
    )

    # Notifications (SES); notifier is a no-op unless both are set
    SES_FROM: Optional[str] = Field(default=None, validation_alias="SES_FROM")
    SES_TO: Optional[str] = Field(default=None, validation_alias="SES_TO")

    # Upload ceilings
    MAX_BODY_BYTES: int = Field(
        default=10 * 1024 * 1024, validation_alias="MAX_BODY_BYTES"
    )
    MAX_FILE_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="MAX_FILE_BYTES"
    )
    MAX_TOTAL_BYTES: int = Field(
        default=100 * 1024 * 1024, validation_alias="MAX_TOTAL_BYTES"
    )

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(default="*", validation_alias="ALLOWED_ORIGIN")
    REDIS_URL: Optional[str] = Field(default=None, validation_alias="REDIS_URL")
    RATE_LIMIT_TIMES: int = Field(default=60, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Logging knobs
    LOGGER_NAME: str = "failure-uploader"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    @property
    def AUTH_ENABLED(self) -> bool:
        return bool(self.API_KEY) and self.STAGE != Environment.DEV

    @property
    def NOTIFICATIONS_ENABLED(self) -> bool:
        return bool(self.SES_FROM) and bool(self.SES_TO)

    @property
    def RATE_LIMIT_ENABLED(self) -> bool:
        return bool(self.REDIS_URL)


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
