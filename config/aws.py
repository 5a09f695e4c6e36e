# config/aws.py
from functools import lru_cache
import boto3
from botocore.client import BaseClient
from botocore.config import Config
from config.settings import settings


@lru_cache(maxsize=1)
def get_s3_client() -> BaseClient:
    """
    Cached S3 client. Presigned URLs use SigV4; S3_ENDPOINT_URL points at
    LocalStack/MinIO when set.
    """
    return boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
        config=Config(signature_version="s3v4"),
    )


@lru_cache(maxsize=1)
def get_ses_client() -> BaseClient:
    return boto3.client("ses", region_name=settings.AWS_REGION)
