# util/functions.py
from typing import Iterable, List, Optional
from util.constants import ContentTypes


def content_type_or_default(declared: Optional[str]) -> str:
    """Declared content type when present, else the generic binary type."""
    declared = (declared or "").strip()
    return declared or ContentTypes.BINARY


def dedupe(items: Iterable[str]) -> List[str]:
    """
    - Drop repeated entries while keeping first-seen order.
    """
    seen = set()
    out: List[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out
