import re
import secrets
from collections.abc import Callable

IDENTIFIER_BYTES = 16

_IDENTIFIER_RE = re.compile(r"[0-9a-f]{32}\.[a-z0-9]{1,5}")


def generate_storage_identifier(
    extension: str,
    token_source: Callable[[int], bytes] = secrets.token_bytes,
) -> str:
    """Return 128 random bits as hex plus the sniffed *extension*, e.g. "3f…9a.jpg".

    The extension must come from the FormatDetector, never from client input.
    """
    suffix = extension.lower().lstrip(".")
    if not re.fullmatch(r"[a-z0-9]{1,5}", suffix):
        raise ValueError(f"Invalid storage extension '{extension}'")
    return f"{token_source(IDENTIFIER_BYTES).hex()}.{suffix}"


def is_storage_identifier(text: str) -> bool:
    return _IDENTIFIER_RE.fullmatch(text) is not None
