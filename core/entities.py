# core/entities.py
import secrets
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple
from util.enums import Slot


def new_bundle_id() -> str:
    """128 bits from the OS CSPRNG, hex encoded."""
    return secrets.token_hex(16)


@dataclass(frozen=True)
class BundleIdentity:
    """
    Who a bundle belongs to and when it was ticketed.

    The creation date is captured once, here, so every key derived from the
    identity shares the same date component.
    """

    project: str
    environment: str
    bundle_id: str
    created: date

    @classmethod
    def new(
        cls, project: str, environment: str, now: Optional[datetime] = None
    ) -> "BundleIdentity":
        now = now or datetime.now(timezone.utc)
        return cls(
            project=project,
            environment=environment,
            bundle_id=new_bundle_id(),
            created=now.astimezone(timezone.utc).date(),
        )


@dataclass(frozen=True)
class SlotUpload:
    slot: Slot
    key: str
    url: str
    content_type: str
    filename: Optional[str] = None


@dataclass(frozen=True)
class Ticket:
    identity: BundleIdentity
    key_prefix: str
    uploads: Tuple[SlotUpload, ...]
    expires_in_seconds: int

    def by_slot(self, slot: Slot) -> List[SlotUpload]:
        return [u for u in self.uploads if u.slot == slot]

    def single(self, slot: Slot) -> SlotUpload:
        found = self.by_slot(slot)
        if len(found) != 1:
            raise KeyError(slot.value)
        return found[0]


@dataclass(frozen=True)
class RequestMeta:
    method: str = ""
    url: str = ""


@dataclass(frozen=True)
class ClientMeta:
    app_version: str = ""
    platform: str = ""


@dataclass(frozen=True)
class CompletionClaim:
    bundle_id: str
    project: str
    environment: str
    keys: Tuple[str, ...]
    checksums: Dict[str, str] = field(default_factory=dict)
    request: RequestMeta = field(default_factory=RequestMeta)
    client: ClientMeta = field(default_factory=ClientMeta)


@dataclass(frozen=True)
class Notification:
    bundle_id: str
    project: str
    environment: str
    request_method: str
    request_url: str
    app_version: str
    platform: str
    envelope_url: str = ""


@dataclass(frozen=True)
class CompletionResult:
    bundle_id: str
    checked_keys: Tuple[str, ...]
    envelope_url: str
    notified: bool
