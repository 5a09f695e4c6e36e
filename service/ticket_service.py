# service/ticket_service.py
import logging
from datetime import datetime
from typing import Callable, List, Optional
from core import keys
from core.entities import BundleIdentity, SlotUpload, Ticket
from model.api import UploadTicketRequest
from repository.storage_authority import StorageAuthority
from util.constants import ContentTypes
from util.enums import Slot
from util.errors import AuthorizationFailed, CapabilityError
from util.functions import content_type_or_default
from util.timing import timed


class TicketService:
    """
    Issues one write capability per bundle slot. Stateless: nothing is stored
    between the ticket and the completion call.
    """

    def __init__(
        self,
        storage: StorageAuthority,
        ttl_seconds: int,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._storage = storage
        self._ttl = int(ttl_seconds)
        self._log = logger or logging.getLogger(__name__)
        self._clock = clock

    async def issue_ticket(self, req: UploadTicketRequest) -> Ticket:
        """
        Assumes `req` already passed RequestValidationService.
        All-or-nothing: any capability failure raises AuthorizationFailed and
        no partial ticket is returned.
        """
        now = self._clock() if self._clock else None
        identity = BundleIdentity.new(req.project, req.env, now=now)
        files = req.request.files
        keyset = keys.derive_for(identity, [f.filename for f in files])

        self._log.info(
            "ticket.create bundle=%s project=%s env=%s files=%d",
            identity.bundle_id,
            identity.project,
            identity.environment,
            len(files),
        )

        plan: List[tuple] = [
            (Slot.ENVELOPE, keyset.envelope, ContentTypes.JSON, None),
            (
                Slot.REQUEST_RAW,
                keyset.request_raw,
                content_type_or_default(req.request.contentType),
                None,
            ),
            (Slot.REQUEST_HEADERS, keyset.request_headers, ContentTypes.JSON, None),
            (Slot.RESPONSE_RAW, keyset.response_raw, ContentTypes.BINARY, None),
            (Slot.CHECKSUMS, keyset.checksums, ContentTypes.JSON, None),
        ]
        for f in files:
            plan.append(
                (
                    Slot.FILE,
                    keyset.file(f.filename),
                    content_type_or_default(f.contentType),
                    f.filename,
                )
            )

        uploads: List[SlotUpload] = []
        with timed(self._log, "ticket.presign", bundle=identity.bundle_id, slots=len(plan)):
            for slot, key, content_type, filename in plan:
                try:
                    url = await self._storage.issue_write(key, content_type, self._ttl)
                except CapabilityError as exc:
                    self._log.error(
                        "ticket.presign.error bundle=%s slot=%s",
                        identity.bundle_id,
                        slot.value,
                    )
                    raise AuthorizationFailed(key) from exc
                uploads.append(
                    SlotUpload(
                        slot=slot,
                        key=key,
                        url=url,
                        content_type=content_type,
                        filename=filename,
                    )
                )

        return Ticket(
            identity=identity,
            key_prefix=keyset.prefix,
            uploads=tuple(uploads),
            expires_in_seconds=self._ttl,
        )
