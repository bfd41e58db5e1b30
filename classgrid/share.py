"""
Share links.

The whole schedule is serialized to compact JSON and encoded with URL-safe
base64 (padding stripped), then placed in the `s` query parameter:

    https://classgrid.app/builder?s=<token>

Decoding is stateless and forgiving: a broken token yields None instead of an
exception, so a bad link never blocks the user from a fresh session.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Iterable, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from classgrid.model import ClassEntry, ValidationError
from classgrid.schedule import import_entries

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://classgrid.app"
SHARE_PARAM = "s"


def encode_entries(entries: Iterable[ClassEntry]) -> str:
    payload = json.dumps([e.to_dict() for e in entries], ensure_ascii=False, separators=(",", ":"))
    token = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return token.rstrip("=")


def decode_entries(token: str) -> Optional[list[ClassEntry]]:
    """
    Reverse of encode_entries. Returns None for any malformed token.

    Tokens in the standard base64 alphabet ('+', '/') and padded tokens are
    accepted as well.
    """
    text = (token or "").strip()
    if not text:
        return None
    text = text.replace("+", "-").replace("/", "_").rstrip("=")
    text += "=" * (-len(text) % 4)
    try:
        raw = base64.urlsafe_b64decode(text.encode("ascii"))
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, list):
            raise ValidationError("shared data is not a list")
        return [ClassEntry.from_dict(d) for d in data]
    except (binascii.Error, UnicodeError, ValueError, RecursionError) as e:
        # json.JSONDecodeError and ValidationError are ValueErrors;
        # RecursionError comes from deeply nested JSON
        logger.debug("Could not decode share token: %s", e)
        return None


def build_share_url(entries: Iterable[ClassEntry], base_url: str = DEFAULT_BASE_URL) -> str:
    query = urlencode({SHARE_PARAM: encode_entries(entries)})
    return f"{base_url.rstrip('/')}/builder?{query}"


def token_from_url(text: str) -> str:
    """
    Extract the share token from a link; a bare token is returned unchanged.
    """
    text = (text or "").strip()
    if "?" not in text and "://" not in text:
        return text
    values = parse_qs(urlsplit(text).query).get(SHARE_PARAM, [])
    return values[0] if values else ""


def load_shared(entries: list[ClassEntry], link_or_token: str) -> tuple[list[ClassEntry], str]:
    """
    Open a shared schedule into an empty schedule.

    Returns the (possibly unchanged) entry list and a message for the user.
    A broken link or a non-empty schedule leaves `entries` untouched.
    """
    shared = decode_entries(token_from_url(link_or_token))
    if shared is None:
        return entries, "Could not read the shared schedule."
    if entries:
        return entries, "Your schedule is not empty; clear it first to open a shared one."
    return import_entries(entries, shared), f"Loaded {len(shared)} shared classes."
