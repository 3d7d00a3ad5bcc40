import base64

from snapsolve.models.context import ImagePayload

_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_media_type(data: bytes) -> str:
    """Guess an image MIME type from its magic bytes; PNG when unknown."""
    for signature, media_type in _SIGNATURES:
        if data.startswith(signature):
            return media_type
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/png"


def encode_image(path: str, data: bytes) -> ImagePayload:
    return ImagePayload(
        path=path,
        media_type=sniff_media_type(data),
        data=base64.b64encode(data).decode("ascii"),
    )
