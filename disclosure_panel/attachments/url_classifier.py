"""Classification of attachment references (inline ``data:`` URIs vs. URLs)."""

import base64
import binascii
import logging
from urllib.parse import unquote_to_bytes

logger = logging.getLogger(__name__)

INLINE_DATA_PREFIX = "data:"
_ABSOLUTE_PREFIXES = ("http://", "https://")


def is_inline_data(ref: str) -> bool:
    return isinstance(ref, str) and ref.startswith(INLINE_DATA_PREFIX)


def is_absolute(ref: str) -> bool:
    return isinstance(ref, str) and ref.lower().startswith(_ABSOLUTE_PREFIXES)


def resolve(ref: str, base: str) -> str:
    """Return the absolute address for ``ref``.

    Inline data and absolute URLs are returned unchanged. Relative references
    are joined to ``base`` with exactly one ``/`` between them, whether or not
    the reference already starts with one.
    """
    if is_inline_data(ref) or is_absolute(ref):
        return ref
    return f"{(base or '').rstrip('/')}/{ref.lstrip('/')}"


def _split_inline(ref: str) -> tuple[str, str]:
    header, _, payload = ref[len(INLINE_DATA_PREFIX):].partition(",")
    return header, payload


def extract_inline_mime_type(ref: str) -> str:
    """Return the MIME type declared by a ``data:`` URI, or ``""``.

    ``data:image/png;base64,AA==`` yields ``image/png``.
    """
    if not is_inline_data(ref):
        return ""
    header, _ = _split_inline(ref)
    return header.split(";", 1)[0].strip()


def decode_inline_payload(ref: str) -> bytes:
    """Decode the payload of a ``data:`` URI to bytes.

    Base64 payloads are decoded when the header carries ``;base64``; other
    payloads are percent-decoded. A malformed base64 payload is returned as
    its raw text.
    """
    header, payload = _split_inline(ref)
    if ";base64" in header.lower():
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError):
            logger.debug("Inline payload is not valid base64; showing it raw")
            return payload.encode("utf-8")
    return unquote_to_bytes(payload)


def decode_inline_text(ref: str) -> str:
    return decode_inline_payload(ref).decode("utf-8", errors="replace")
