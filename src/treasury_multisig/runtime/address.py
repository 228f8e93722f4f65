"""
AccountId Pydantic custom type for Stellar account addresses.
"""

from typing import Any
from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema
from stellar_sdk import StrKey, xdr as stellar_xdr

from .errors import WrongSourceAccountError


class AccountId:
    """Custom Pydantic type for StrKey encoded Ed25519 account addresses (G...)."""

    def __init__(self, address: str):
        if not isinstance(address, str):
            raise ValueError("AccountId must be a string")
        if not address:
            raise ValueError("AccountId cannot be empty")
        if not StrKey.is_valid_ed25519_public_key(address):
            raise ValueError(f"Invalid Ed25519 account address: {address}")

        self.address = address

    @classmethod
    def from_raw(cls, raw_key: bytes) -> "AccountId":
        """Create an AccountId from a 32-byte Ed25519 public key."""
        if len(raw_key) != 32:
            raise ValueError(f"Account key must be 32 bytes, got {len(raw_key)}")
        return cls(StrKey.encode_ed25519_public_key(raw_key))

    @property
    def raw_key(self) -> bytes:
        """The 32-byte public key behind the address."""
        return StrKey.decode_ed25519_public_key(self.address)

    def __str__(self) -> str:
        return self.address

    def __repr__(self) -> str:
        return f"AccountId('{self.address}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AccountId):
            return self.address == other.address
        elif isinstance(other, str):
            return self.address == other
        return False

    def __hash__(self) -> int:
        return hash(self.address)

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Return a Pydantic CoreSchema that validates the AccountId."""
        return core_schema.no_info_before_validator_function(
            cls._validate,
            core_schema.is_instance_schema(cls),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def _validate(cls, value: Any, _info=None) -> "AccountId":
        """Validate and convert the input to an AccountId."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value)
        raise ValueError(f"Invalid AccountId: {value}")


def source_public_key(account: stellar_xdr.MuxedAccount) -> AccountId:
    """
    Reduce an envelope's source account to a plain account address.

    Multiplexed (M...) source accounts are not accepted as treasury sources.

    Raises:
        WrongSourceAccountError: If the source is not a plain Ed25519 account
    """
    if account.type != stellar_xdr.CryptoKeyType.KEY_TYPE_ED25519:
        raise WrongSourceAccountError(details={"source_type": account.type.name})
    return AccountId.from_raw(account.ed25519.uint256)
