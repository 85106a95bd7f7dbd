"""Stored credential encodings and the verifier that migrates them.

A stored credential is either a legacy plaintext password or a salted hash
tagged with its scheme prefix. The raw column value is decoded into one of the
two variants once, when it is read from the store, so nothing downstream has
to sniff prefixes again.

Verifying a legacy credential successfully produces an upgraded (hashed)
credential that the caller is expected to persist. Organic login traffic
therefore migrates the whole table to hashed form without a bulk job.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from aktywni.core.security import get_password_hash, identify_hash_scheme, pwd_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlaintextCredential:
    """A legacy password stored as-is."""

    value: str

    def __repr__(self) -> str:
        return "PlaintextCredential(<redacted>)"


@dataclass(frozen=True, slots=True)
class HashedCredential:
    """A password run through the configured salted hash scheme."""

    value: str


Credential = PlaintextCredential | HashedCredential


@dataclass(frozen=True, slots=True)
class VerificationResult:
    matched: bool
    upgraded_credential: HashedCredential | None = None


def decode_credential(raw: str) -> Credential:
    """Classify a raw stored value. Anything without a known scheme tag is plaintext."""
    if identify_hash_scheme(raw) is not None:
        return HashedCredential(raw)
    return PlaintextCredential(raw)


def hash_credential(plaintext: str) -> HashedCredential:
    """Hash a password for storage. New credentials are never stored as plaintext."""
    return HashedCredential(get_password_hash(plaintext))


def verify(attempt: str, credential: Credential) -> VerificationResult:
    """
    Check ``attempt`` against a stored credential.

    - Hashed: the scheme's own constant-time comparison, never an upgrade.
    - Plaintext: exact equality; on a match a fresh hash of the attempt is
      returned as ``upgraded_credential``.

    Failures of the hashing primitive count as a mismatch.
    """
    try:
        if isinstance(credential, HashedCredential):
            return VerificationResult(matched=pwd_context.verify(attempt, credential.value))

        matched = hmac.compare_digest(
            attempt.encode("utf-8"), credential.value.encode("utf-8")
        )
        if not matched:
            return VerificationResult(matched=False)
        return VerificationResult(matched=True, upgraded_credential=hash_credential(attempt))
    except (ValueError, TypeError) as e:
        logger.warning("Credential verification failed: %s", type(e).__name__)
        return VerificationResult(matched=False)


def dummy_verify() -> None:
    """Spend roughly the time of a real hash check when there is nothing to check against."""
    pwd_context.dummy_verify()
