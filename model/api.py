# model/api.py
from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field
from core.entities import ClientMeta, CompletionClaim, RequestMeta, Ticket
from util.enums import Slot


# ---------------- Upload ticket ----------------


class FileInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    filename: str = ""
    contentType: str = ""
    size: int = Field(default=0, alias="bytes")


class RequestInfo(BaseModel):
    method: str = ""
    url: str = ""
    contentType: str = ""
    bodyBytes: int = 0
    files: list[FileInfo] = Field(default_factory=list)


class ClientInfo(BaseModel):
    appVersion: str = ""
    platform: str = ""


class UploadTicketRequest(BaseModel):
    # Shape only; rules live in RequestValidationService so every violation is reported.
    project: str = ""
    env: str = ""
    request: RequestInfo = Field(default_factory=RequestInfo)
    client: ClientInfo = Field(default_factory=ClientInfo)


class PresignedUpload(BaseModel):
    key: str
    putUrl: str


class FileUpload(PresignedUpload):
    filename: str


class UploadURLs(BaseModel):
    envelope: PresignedUpload
    requestRaw: PresignedUpload
    requestHeaders: PresignedUpload
    responseRaw: PresignedUpload
    checksums: PresignedUpload
    files: list[FileUpload] = Field(default_factory=list)


class UploadTicketResponse(BaseModel):
    failureId: str
    s3Prefix: str
    uploads: UploadURLs
    expiresInSeconds: int

    @classmethod
    def from_ticket(cls, ticket: Ticket) -> "UploadTicketResponse":
        def one(slot: Slot) -> PresignedUpload:
            u = ticket.single(slot)
            return PresignedUpload(key=u.key, putUrl=u.url)

        return cls(
            failureId=ticket.identity.bundle_id,
            s3Prefix=ticket.key_prefix,
            uploads=UploadURLs(
                envelope=one(Slot.ENVELOPE),
                requestRaw=one(Slot.REQUEST_RAW),
                requestHeaders=one(Slot.REQUEST_HEADERS),
                responseRaw=one(Slot.RESPONSE_RAW),
                checksums=one(Slot.CHECKSUMS),
                files=[
                    FileUpload(key=u.key, putUrl=u.url, filename=u.filename or "")
                    for u in ticket.by_slot(Slot.FILE)
                ],
            ),
            expiresInSeconds=ticket.expires_in_seconds,
        )


# ---------------- Upload complete ----------------


class RequestEcho(BaseModel):
    method: str = ""
    url: str = ""


class UploadCompleteRequest(BaseModel):
    failureId: str = ""
    project: str = ""
    env: str = ""
    uploadedKeys: list[str] = Field(default_factory=list)
    sha256: dict[str, str] | None = None
    # Optional echoes of the ticket request, used only for the notification.
    request: RequestEcho | None = None
    client: ClientInfo | None = None

    def to_claim(self) -> CompletionClaim:
        req = self.request or RequestEcho()
        cli = self.client or ClientInfo()
        return CompletionClaim(
            bundle_id=self.failureId,
            project=self.project,
            environment=self.env,
            keys=tuple(self.uploadedKeys),
            checksums=dict(self.sha256 or {}),
            request=RequestMeta(method=req.method.upper(), url=req.url),
            client=ClientMeta(app_version=cli.appVersion, platform=cli.platform),
        )


class UploadCompleteResponse(BaseModel):
    status: Literal["ok"] = "ok"


# ---------------- Misc ----------------


class HealthResponse(BaseModel):
    ok: bool
    status: str
    time: str


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
    details: list[Any] | None = None
