"""
Validator configuration.

Holds the treasury allow-list, fee bounds, signing window, network selection
and the timeout applied to every ledger query.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .codec.hashes import PUBLIC_NETWORK_PASSPHRASE, network_id
from .runtime.address import AccountId

TREASURY_FOUNDATION = "GDX23CPGMQ4LN55VGEDVFZPAJMAUEHSHAMJ2GMCU2ZSHN5QF4TMZYPIS"

DEFAULT_ALLOWED_SOURCES = [
    TREASURY_FOUNDATION,
    "GACKTN5DAZGWXRWB2WLM6OPBDHAMT6SJNGLJZPQMEZBUR4JUGBX2UK7V",
    "GDUI7JVKWZV4KJVY4EJYBXMGXC2J3ZC67Z6O5QFP4ZMVQM2U5JXK2OK3",
    "GATUN5FV3QF35ZMU3C63UZ63GOFRYUHXV2SHKNTKPBZGYF2DU3B7IW6Z",
    "GB7NLVMVC6NWTIFK7ULLEQDF5CBCI2TDCO3OZWWSFXQCT7OPU3P4EOSR",
    "GAUBJ4CTRF42Z7OM7QXTAQZG6BEMNR3JZY57Z4LB3PXSDJXE5A5GIGJB",
    "GDASYWP6F44TVNJKZKQ2UEVZOKTENCJFTWVMP6UC7JBZGY4ZNB6YAVD4",
]

MIN_FEE = 100
MAX_FEE = 20000
SIGNING_TIME_WINDOW = 24 * 60 * 60
FETCH_TIMEOUT = 4.0


class TreasuryConfig(BaseModel):
    """
    Configuration for treasury transaction validation.

    The treasury account's signer set and high threshold govern approval;
    it is always an allowed source account even when missing from the list.
    """
    network_passphrase: str = Field(
        default=PUBLIC_NETWORK_PASSPHRASE,
        description="Passphrase of the ledger network payloads are scoped to"
    )
    horizon_url: str = Field(
        default="https://horizon.stellar.org",
        description="Base URL of the ledger query service"
    )
    treasury_account: AccountId = Field(
        default_factory=lambda: AccountId(TREASURY_FOUNDATION),
        description="Account whose signers approve transactions"
    )
    allowed_source_accounts: List[AccountId] = Field(
        default_factory=lambda: [AccountId(a) for a in DEFAULT_ALLOWED_SOURCES],
        description="Treasury-controlled accounts allowed as transaction source"
    )
    min_fee: int = Field(default=MIN_FEE, ge=0)
    max_fee: int = Field(default=MAX_FEE, ge=0)
    signing_window: int = Field(
        default=SIGNING_TIME_WINDOW,
        description="Minimum seconds signers must have left before expiry"
    )
    fetch_timeout: float = Field(default=FETCH_TIMEOUT, description="Ledger query timeout in seconds")

    model_config = {
        "frozen": True,
    }

    @field_validator('signing_window')
    @classmethod
    def validate_window(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"signing_window must be non-negative, got {v}")
        return v

    @field_validator('fetch_timeout')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {v}")
        return v

    @model_validator(mode='after')
    def validate_fee_range(self) -> TreasuryConfig:
        if self.min_fee > self.max_fee:
            raise ValueError(f"min_fee ({self.min_fee}) exceeds max_fee ({self.max_fee})")
        return self

    @property
    def network_id(self) -> bytes:
        return network_id(self.network_passphrase)

    def is_allowed_source(self, account: AccountId) -> bool:
        return account == self.treasury_account or account in self.allowed_source_accounts

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> TreasuryConfig:
        """Load configuration from a JSON file; absent keys keep their defaults."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)
