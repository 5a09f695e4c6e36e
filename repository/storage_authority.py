# repository/storage_authority.py
import asyncio
import logging
from typing import Final, FrozenSet, Protocol
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from util.errors import CapabilityError, StorageCheckError
from util.timing import timed

logger = logging.getLogger(__name__)

NOT_FOUND_CODES: Final[FrozenSet[str]] = frozenset({"404", "NoSuchKey", "NotFound"})


class StorageAuthority(Protocol):
    """
    Issues time-limited capabilities for single keys and answers presence.
    Implementations raise CapabilityError / StorageCheckError on failure;
    `exists` returns False only for a clean "not found".
    """

    async def issue_write(self, key: str, content_type: str, ttl: int) -> str: ...

    async def issue_read(self, key: str, ttl: int) -> str: ...

    async def exists(self, key: str) -> bool: ...


class S3StorageAuthority:
    """
    S3-backed authority: presigned PUT/GET URLs and HEAD-based existence.

    Presigning is local signing work; HEAD is a network call and runs in a
    worker thread so the event loop keeps serving other requests.
    """

    def __init__(self, client: BaseClient, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    async def issue_write(self, key: str, content_type: str, ttl: int) -> str:
        return self._presign(
            "put_object",
            {"Bucket": self._bucket, "Key": key, "ContentType": content_type},
            key,
            ttl,
        )

    async def issue_read(self, key: str, ttl: int) -> str:
        return self._presign(
            "get_object", {"Bucket": self._bucket, "Key": key}, key, ttl
        )

    async def exists(self, key: str) -> bool:
        with timed(logger, "storage.exists", level=logging.DEBUG, key=key):
            return await asyncio.to_thread(self._head, key)

    def _presign(self, method: str, params: dict, key: str, ttl: int) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod=method, Params=params, ExpiresIn=int(ttl)
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error(
                "storage.presign.error method=%s key=%s err=%s",
                method,
                key,
                type(exc).__name__,
            )
            raise CapabilityError(key) from exc

    def _head(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                logger.debug("storage.exists.not_found key=%s", key)
                return False
            logger.error("storage.exists.error key=%s code=%s", key, code)
            raise StorageCheckError(key) from exc
        except BotoCoreError as exc:
            logger.error(
                "storage.exists.error key=%s err=%s", key, type(exc).__name__
            )
            raise StorageCheckError(key) from exc
        return True
