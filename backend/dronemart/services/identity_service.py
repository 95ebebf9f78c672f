"""
Identity Extractor: the single gate in front of every protected operation.

Input is the raw Authorization header value; pulling it off the request is
the decorator's job (see decorators.require_auth).
"""

from __future__ import annotations

from flask import current_app

from ..errors import AuthFailure, AuthFailureKind
from .credential_service import CredentialCodec, Identity

BEARER_PREFIX = "Bearer "


def get_codec() -> CredentialCodec:
    """The codec built by create_app for this application."""
    return current_app.extensions["credential_codec"]


def extract_identity(raw_header_value: str | None, codec: CredentialCodec) -> Identity:
    """
    Turn an Authorization header value into a verified Identity.

    Raises AuthFailure:
    - MISSING: no header, not a Bearer header, or an empty token
    - INVALID / EXPIRED: as reported by the codec
    """
    if not raw_header_value or not raw_header_value.startswith(BEARER_PREFIX):
        raise AuthFailure(AuthFailureKind.MISSING)

    token = raw_header_value[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthFailure(AuthFailureKind.MISSING)

    return codec.verify(token)
