# service/completion_service.py
import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Sequence
from core import keys
from core.entities import CompletionClaim, CompletionResult, Notification
from core.notifier import Notifier
from repository.storage_authority import StorageAuthority
from util.errors import MissingObjects, VerificationError
from util.functions import dedupe
from util.timing import timed


class CompletionService:
    """
    Confirms a bundle landed in storage, then notifies its owner.

    Flow:
      - check presence of every claimed key plus any required key the claim left out
      - any check error -> VerificationError; any absent key -> MissingObjects(all of them)
      - envelope read link is best-effort; notification is best-effort
    """

    def __init__(
        self,
        storage: StorageAuthority,
        notifier: Notifier,
        read_ttl_seconds: int,
        concurrency: int = 8,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._storage = storage
        self._notifier = notifier
        self._ttl = int(read_ttl_seconds)
        self._concurrency = max(1, int(concurrency))
        self._log = logger or logging.getLogger(__name__)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _today(self) -> date:
        return self._clock().astimezone(timezone.utc).date()

    async def complete_bundle(self, claim: CompletionClaim) -> CompletionResult:
        # The date lives only in the keys the client uploaded to.
        created = keys.bundle_date_from_keys(
            claim.keys, claim.project, claim.environment, claim.bundle_id
        )
        if created is None:
            created = self._today()
        keyset = keys.derive(claim.project, claim.environment, claim.bundle_id, created)
        to_check = dedupe(list(claim.keys) + list(keyset.required))

        self._log.info(
            "complete.start bundle=%s project=%s env=%s claimed=%d checking=%d checksums=%d",
            claim.bundle_id,
            claim.project,
            claim.environment,
            len(claim.keys),
            len(to_check),
            len(claim.checksums),
        )

        missing = await self._find_missing(claim.bundle_id, to_check)
        if missing:
            self._log.warning(
                "complete.missing bundle=%s count=%d keys=%s",
                claim.bundle_id,
                len(missing),
                ",".join(missing),
            )
            raise MissingObjects(missing)

        envelope_url = await self._envelope_url(claim.bundle_id, keyset.envelope)
        notification = Notification(
            bundle_id=claim.bundle_id,
            project=claim.project,
            environment=claim.environment,
            request_method=claim.request.method,
            request_url=claim.request.url,
            app_version=claim.client.app_version,
            platform=claim.client.platform,
            envelope_url=envelope_url,
        )
        notified = await self._notify(notification)

        self._log.info(
            "complete.ok bundle=%s notified=%s", claim.bundle_id, notified
        )
        return CompletionResult(
            bundle_id=claim.bundle_id,
            checked_keys=tuple(to_check),
            envelope_url=envelope_url,
            notified=notified,
        )

    async def _find_missing(self, bundle_id: str, to_check: Sequence[str]) -> List[str]:
        """
        Run every check before deciding so the full missing list is reported.
        """
        sem = asyncio.Semaphore(self._concurrency)

        async def _one(key: str) -> bool:
            async with sem:
                return await self._storage.exists(key)

        with timed(self._log, "complete.verify", bundle=bundle_id, keys=len(to_check)):
            results = await asyncio.gather(
                *(_one(k) for k in to_check), return_exceptions=True
            )

        missing: List[str] = []
        for key, res in zip(to_check, results):
            if isinstance(res, Exception):
                self._log.error(
                    "complete.verify.error bundle=%s key=%s err=%s",
                    bundle_id,
                    key,
                    type(res).__name__,
                )
                raise VerificationError(key) from res
            if isinstance(res, BaseException):
                raise res
            if not res:
                missing.append(key)
        return missing

    async def _envelope_url(self, bundle_id: str, envelope_key: str) -> str:
        try:
            return await self._storage.issue_read(envelope_key, self._ttl)
        except Exception as exc:
            # Objects are stored; a missing preview link is the lesser harm.
            self._log.error(
                "complete.envelope_url.error bundle=%s err=%s",
                bundle_id,
                type(exc).__name__,
            )
            return ""

    async def _notify(self, notification: Notification) -> bool:
        try:
            await self._notifier.send(notification)
        except Exception as exc:
            self._log.error(
                "complete.notify.failed bundle=%s err=%s",
                notification.bundle_id,
                type(exc).__name__,
            )
            return False
        return True
