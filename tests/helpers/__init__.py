from .mocks import FakeLedgerClient
from .factories import (
    DAY,
    NET_ID,
    NOW,
    mk_account_id,
    mk_envelope,
    mk_fee_bump_envelope_bytes,
    mk_key,
    mk_muxed,
    mk_transaction,
    mk_v0_envelope_bytes,
)

__all__ = [
    "FakeLedgerClient",
    "DAY",
    "NET_ID",
    "NOW",
    "mk_account_id",
    "mk_envelope",
    "mk_fee_bump_envelope_bytes",
    "mk_key",
    "mk_muxed",
    "mk_transaction",
    "mk_v0_envelope_bytes",
]
