import base64
import binascii
from typing import Protocol

from cubequality.schemas.report import MediaBlob

DEFAULT_MEDIA_TYPE = "image/jpeg"


class MediaCodec(Protocol):
    def encode(self, blob: MediaBlob) -> str: ...

    def decode(self, token: str) -> MediaBlob: ...


class DataUrlMediaCodec:
    """Stores attachments as ``data:<type>;base64,<bytes>`` text tokens."""

    def encode(self, blob: MediaBlob) -> str:
        body = base64.b64encode(blob.data).decode("ascii")
        return f"data:{blob.content_type};base64,{body}"

    def decode(self, token: str) -> MediaBlob:
        # content type parameters may contain commas
        header, sep, body = token.rpartition(";base64,")
        if not sep or not header.startswith("data:"):
            raise ValueError("Malformed media token")
        content_type = header[len("data:") :] or DEFAULT_MEDIA_TYPE
        try:
            data = base64.b64decode(body, validate=True)
        except binascii.Error as exc:
            raise ValueError("Malformed media token") from exc
        return MediaBlob(content_type=content_type, data=data)
