"""
Transaction envelope codec.

Decodes the ledger's XDR transaction envelope (binary or base64 text) into an
immutable TransactionEnvelope and encodes it back bit-exactly. Only the
version 1 signed transaction variant is supported: legacy version 0 envelopes
and fee-bump envelopes are rejected with distinct failures.
"""

from __future__ import annotations
import base64
import binascii
import logging
import struct
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from stellar_sdk import xdr as stellar_xdr
from xdrlib3 import Error as XdrError

from ..runtime.errors import DecodeError, DeprecatedVersionError, UnsupportedTransactionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureEntry:
    """A signature attached to an envelope, paired with its key fingerprint."""
    hint: bytes
    signature: bytes

    @classmethod
    def from_xdr(cls, decorated: stellar_xdr.DecoratedSignature) -> SignatureEntry:
        return cls(
            hint=bytes(decorated.hint.signature_hint),
            signature=bytes(decorated.signature.signature),
        )

    def to_xdr(self) -> stellar_xdr.DecoratedSignature:
        return stellar_xdr.DecoratedSignature(
            hint=stellar_xdr.SignatureHint(self.hint),
            signature=stellar_xdr.Signature(self.signature),
        )


@dataclass(frozen=True)
class TimeBounds:
    """Validity window in unix seconds; a max_time of 0 means no upper bound."""
    min_time: int
    max_time: int


def _extract_time_bounds(cond: stellar_xdr.Preconditions) -> Optional[TimeBounds]:
    bounds = None
    if cond.type == stellar_xdr.PreconditionType.PRECOND_TIME:
        bounds = cond.time_bounds
    elif cond.type == stellar_xdr.PreconditionType.PRECOND_V2:
        bounds = cond.v2.time_bounds
    if bounds is None:
        return None
    return TimeBounds(
        min_time=bounds.min_time.time_point.uint64,
        max_time=bounds.max_time.time_point.uint64,
    )


class TransactionEnvelope:
    """
    Immutable signed transaction envelope.

    The transaction body is held as its canonical XDR bytes; accessors hand
    out fresh decoded copies, so no caller can mutate the envelope in place.
    Equality is equality of the encoded form.
    """

    __slots__ = ("_tx_bytes", "_signatures", "_fee", "_sequence", "_time_bounds", "_operation_count")

    def __init__(self, transaction: stellar_xdr.Transaction,
                 signatures: Iterable[SignatureEntry] = ()):
        self._tx_bytes = transaction.to_xdr_bytes()
        self._signatures: Tuple[SignatureEntry, ...] = tuple(signatures)
        self._fee = transaction.fee.uint32
        self._sequence = transaction.seq_num.sequence_number.int64
        self._time_bounds = _extract_time_bounds(transaction.cond)
        self._operation_count = len(transaction.operations)

    @classmethod
    def from_xdr_object(cls, envelope: stellar_xdr.TransactionEnvelope) -> TransactionEnvelope:
        """
        Build from a decoded XDR envelope union.

        Raises:
            DeprecatedVersionError: For version 0 envelopes
            UnsupportedTransactionError: For any other non version 1 variant
        """
        if envelope.type == stellar_xdr.EnvelopeType.ENVELOPE_TYPE_TX:
            v1 = envelope.v1
            return cls(v1.tx, (SignatureEntry.from_xdr(s) for s in v1.signatures))
        if envelope.type == stellar_xdr.EnvelopeType.ENVELOPE_TYPE_TX_V0:
            raise DeprecatedVersionError()
        raise UnsupportedTransactionError(details={"envelope_type": envelope.type.name})

    def transaction(self) -> stellar_xdr.Transaction:
        """Fresh decoded copy of the transaction body."""
        return stellar_xdr.Transaction.from_xdr_bytes(self._tx_bytes)

    @property
    def transaction_bytes(self) -> bytes:
        return self._tx_bytes

    @property
    def source_account(self) -> stellar_xdr.MuxedAccount:
        return self.transaction().source_account

    @property
    def fee(self) -> int:
        return self._fee

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def time_bounds(self) -> Optional[TimeBounds]:
        return self._time_bounds

    @property
    def operation_count(self) -> int:
        return self._operation_count

    @property
    def signatures(self) -> Tuple[SignatureEntry, ...]:
        return self._signatures

    def signature_hints(self) -> List[bytes]:
        """Hints in attachment order; duplicates are preserved."""
        return [s.hint for s in self._signatures]

    def with_signature(self, entry: SignatureEntry) -> TransactionEnvelope:
        """Return a new envelope with one more signature appended."""
        return TransactionEnvelope(self.transaction(), self._signatures + (entry,))

    def with_signatures(self, entries: Iterable[SignatureEntry]) -> TransactionEnvelope:
        """Return a new envelope carrying exactly the given signatures."""
        return TransactionEnvelope(self.transaction(), entries)

    def to_xdr_object(self) -> stellar_xdr.TransactionEnvelope:
        return stellar_xdr.TransactionEnvelope(
            type=stellar_xdr.EnvelopeType.ENVELOPE_TYPE_TX,
            v1=stellar_xdr.TransactionV1Envelope(
                tx=self.transaction(),
                signatures=[s.to_xdr() for s in self._signatures],
            ),
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, TransactionEnvelope):
            return NotImplemented
        return encode(self) == encode(other)

    def __hash__(self) -> int:
        return hash(encode(self))

    def __repr__(self) -> str:
        return (f"TransactionEnvelope(seq={self._sequence}, fee={self._fee}, "
                f"ops={self._operation_count}, signatures={len(self._signatures)})")


def encode(envelope: TransactionEnvelope) -> bytes:
    """Canonical binary XDR of the envelope."""
    return envelope.to_xdr_object().to_xdr_bytes()


def encode_text(envelope: TransactionEnvelope) -> str:
    """Base64 text form of the envelope's XDR."""
    return envelope.to_xdr_object().to_xdr()


def decode(data: Union[bytes, bytearray, str]) -> TransactionEnvelope:
    """
    Decode an envelope from binary XDR, or from base64 text when given a str.

    Raises:
        DecodeError: If the data is not a well-formed envelope
        DeprecatedVersionError: For version 0 envelopes
        UnsupportedTransactionError: For fee-bump and other variants
    """
    if isinstance(data, str):
        return decode_text(data)

    raw = bytes(data)
    try:
        parsed = stellar_xdr.TransactionEnvelope.from_xdr_bytes(raw)
    except (XdrError, EOFError, ValueError, struct.error) as e:
        raise DecodeError(details={"length": len(raw)}, cause=e) from e

    # Trailing bytes or non-canonical padding would break the round trip
    if parsed.to_xdr_bytes() != raw:
        raise DecodeError("Transaction envelope is not canonically encoded",
                          details={"length": len(raw)})

    envelope = TransactionEnvelope.from_xdr_object(parsed)
    logger.debug(f"Decoded envelope {envelope!r}")
    return envelope


def decode_text(text: str) -> TransactionEnvelope:
    """Decode an envelope from its base64 text form."""
    try:
        raw = base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Transaction is not valid base64", cause=e) from e
    return decode(raw)
