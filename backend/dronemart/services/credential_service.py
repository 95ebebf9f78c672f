# Overview: Signed, time-bound bearer credentials.

"""
Credential Codec

WHY: Every protected request must carry proof of a prior login. A credential
is a signed payload (subject id, username, issued-at, expires-at) so it can be
verified without a database round trip.

SECURITY NOTES:
- HMAC-SHA256 over the URL-safe serialized payload (itsdangerous)
- Signing key and validity window come from an explicit CredentialSettings
  built once at app start; there is no module-level mutable key
- verify() reports only INVALID or EXPIRED. A malformed token, a tampered
  payload and a wrong signature are indistinguishable to the caller.
- Timestamps are whole epoch seconds from the issuing process clock; no skew
  compensation.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable

from itsdangerous import BadData, URLSafeSerializer

from ..errors import AuthFailure, AuthFailureKind
from ..time_utils import epoch_seconds


SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class CredentialSettings:
    secret_key: str
    ttl_hours: int = 24
    salt: str = "dronemart.credential"

    @classmethod
    def from_config(cls, config) -> "CredentialSettings":
        return cls(
            secret_key=config["CREDENTIAL_SECRET"],
            ttl_hours=int(config["CREDENTIAL_TTL_HOURS"]),
            salt=config["CREDENTIAL_SALT"],
        )


@dataclass(frozen=True)
class Identity:
    """
    Verified caller. Only CredentialCodec.verify builds these; never construct
    one from request data.
    """
    subject_id: int
    display_name: str
    issued_at: int
    expires_at: int


class CredentialCodec:
    def __init__(self, settings: CredentialSettings, clock: Callable[[], int] | None = None):
        if not settings.secret_key:
            raise ValueError("Credential signing key is not configured")
        self.settings = settings
        self._clock = clock or epoch_seconds
        self._serializer = URLSafeSerializer(
            settings.secret_key,
            salt=settings.salt,
            signer_kwargs={"digest_method": hashlib.sha256},
        )

    def now(self) -> int:
        return int(self._clock())

    def issue(self, subject_id: int, display_name: str) -> str:
        issued_at = self.now()
        expires_at = issued_at + self.settings.ttl_hours * SECONDS_PER_HOUR
        return self._serializer.dumps({
            "sub": subject_id,
            "username": display_name,
            "iat": issued_at,
            "exp": expires_at,
        })

    def verify(self, credential: str) -> Identity:
        """
        Decode and check a credential.

        Raises AuthFailure(INVALID) for anything that does not carry a valid
        signature over a well-formed payload, AuthFailure(EXPIRED) once
        expires_at is not in the future.
        """
        if not isinstance(credential, str) or not credential:
            raise AuthFailure(AuthFailureKind.INVALID)

        try:
            payload = self._serializer.loads(credential)
        except BadData:
            raise AuthFailure(AuthFailureKind.INVALID)

        identity = _identity_from_payload(payload)
        if identity is None:
            raise AuthFailure(AuthFailureKind.INVALID)

        if identity.expires_at <= self.now():
            raise AuthFailure(AuthFailureKind.EXPIRED)

        return identity


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _identity_from_payload(payload) -> Identity | None:
    if not isinstance(payload, dict):
        return None
    sub = payload.get("sub")
    username = payload.get("username")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if not (_is_int(sub) and isinstance(username, str) and _is_int(iat) and _is_int(exp)):
        return None
    return Identity(subject_id=sub, display_name=username, issued_at=iat, expires_at=exp)
