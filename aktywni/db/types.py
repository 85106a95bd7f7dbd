"""Column types that decode stored values at the store boundary."""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from aktywni.domain.credentials import (
    Credential,
    HashedCredential,
    PlaintextCredential,
    decode_credential,
)


class CredentialType(TypeDecorator):
    """Stores a credential as its raw string; loads it as a tagged variant."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, (PlaintextCredential, HashedCredential)):
            raise TypeError(
                f"credential must be PlaintextCredential or HashedCredential, not {type(value).__name__}"
            )
        return value.value

    def process_result_value(self, value, dialect) -> Credential | None:
        if value is None:
            return None
        return decode_credential(value)
