# core/keys.py
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple
from core.entities import BundleIdentity
from repository import namespaces as ns


@dataclass(frozen=True)
class KeySet:
    """
    Object keys for one bundle. Layout:
      failures/{project}/{env}/YYYY/MM/DD/{bundleId}/envelope.json
                                                    /request.raw
                                                    /request.headers.json
                                                    /checksums.json
                                                    /response.raw
                                                    /files/{filename}
    """

    prefix: str
    files: Tuple[str, ...] = ()

    @property
    def envelope(self) -> str:
        return self.prefix + ns.ENVELOPE

    @property
    def request_raw(self) -> str:
        return self.prefix + ns.REQUEST_RAW

    @property
    def request_headers(self) -> str:
        return self.prefix + ns.REQUEST_HEADERS

    @property
    def checksums(self) -> str:
        return self.prefix + ns.CHECKSUMS

    @property
    def response_raw(self) -> str:
        return self.prefix + ns.RESPONSE_RAW

    def file(self, filename: str) -> str:
        # Verbatim; filenames are sanitized by the request validator.
        return f"{self.prefix}{ns.FILES}/{filename}"

    @property
    def required(self) -> Tuple[str, ...]:
        return (self.envelope, self.request_raw, self.request_headers, self.checksums)

    @property
    def file_keys(self) -> Tuple[str, ...]:
        return tuple(self.file(f) for f in self.files)

    @property
    def all_keys(self) -> Tuple[str, ...]:
        return self.required + (self.response_raw,) + self.file_keys


def prefix_for(project: str, environment: str, bundle_id: str, created: date) -> str:
    return (
        f"{ns.ROOT}/{project}/{environment}/"
        f"{created.strftime(ns.DATE_LAYOUT)}/{bundle_id}/"
    )


def derive(
    project: str,
    environment: str,
    bundle_id: str,
    created: date,
    filenames: Iterable[str] = (),
) -> KeySet:
    """Pure: same inputs always give the same keys."""
    return KeySet(
        prefix=prefix_for(project, environment, bundle_id, created),
        files=tuple(filenames),
    )


def derive_for(identity: BundleIdentity, filenames: Iterable[str] = ()) -> KeySet:
    return derive(
        identity.project,
        identity.environment,
        identity.bundle_id,
        identity.created,
        filenames,
    )


def _bundle_key_pattern(project: str, environment: str, bundle_id: str) -> re.Pattern:
    return re.compile(
        rf"^{re.escape(ns.ROOT)}/{re.escape(project)}/{re.escape(environment)}/"
        rf"(\d{{4}})/(\d{{2}})/(\d{{2}})/{re.escape(bundle_id)}/.+$"
    )


def bundle_date_of(
    key: str, project: str, environment: str, bundle_id: str
) -> Optional[date]:
    """
    Date component of `key` when it lies inside this bundle's namespace,
    else None (foreign key or impossible calendar date).
    """
    m = _bundle_key_pattern(project, environment, bundle_id).fullmatch(key)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def bundle_date_from_keys(
    keys: Iterable[str], project: str, environment: str, bundle_id: str
) -> Optional[date]:
    """First date found among the bundle's keys; None when no key carries one."""
    for key in keys:
        d = bundle_date_of(key, project, environment, bundle_id)
        if d is not None:
            return d
    return None
