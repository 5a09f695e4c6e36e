# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "failures"

# Object names inside one bundle prefix
ENVELOPE: Final[str] = "envelope.json"
REQUEST_RAW: Final[str] = "request.raw"
REQUEST_HEADERS: Final[str] = "request.headers.json"
CHECKSUMS: Final[str] = "checksums.json"
RESPONSE_RAW: Final[str] = "response.raw"
FILES: Final[str] = "files"

DATE_LAYOUT: Final[str] = "%Y/%m/%d"
