# util/constants.py
from typing import Final


class InternalURIs:
    HEALTH = "/health"
    V1 = "/v1"
    UPLOAD_TICKET = V1 + "/upload-ticket"
    UPLOAD_COMPLETE = V1 + "/upload-complete"


class ContentTypes:
    JSON = "application/json"
    BINARY = "application/octet-stream"


API_KEY_HEADER: Final[str] = "X-Api-Key"
REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
