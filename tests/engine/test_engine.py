"""
End-to-end tests for the validation engine against an in-memory ledger.

Treasury: three signers of weight 30, high threshold 60.
"""

from unittest.mock import Mock

import pytest
import requests

from helpers import DAY, NOW, FakeLedgerClient, mk_envelope, mk_key

from treasury_multisig.codec import encode, encode_text
from treasury_multisig.config import TreasuryConfig
from treasury_multisig.crypto import Ed25519PublicKey
from treasury_multisig.engine import ValidationEngine
from treasury_multisig.runtime.errors import (
    AccountNotFoundError,
    ContentChangedError,
    DecodeError,
    ErrorHandler,
    ExcessSignaturesError,
    FetchTimeoutError,
    InsufficientTimeWindowError,
    InvalidSignatureError,
    NonStandardFeeError,
    NotChangedError,
    SignatureRemovedError,
    StaleSequenceError,
    WrongSourceAccountError,
)
from treasury_multisig.transaction import Purpose, ValidatedTransaction


class TestValidateForCreation:

    def test_unsigned_transaction_accepted(self, engine, treasury_key):
        envelope = mk_envelope(treasury_key)

        validated = engine.validate_for_creation(encode(envelope))

        assert isinstance(validated, ValidatedTransaction)
        assert validated.purpose == Purpose.CREATION
        assert validated.envelope == envelope
        assert validated.source == treasury_key.public_key().to_account_id()
        assert validated.identifier == engine.identifier(envelope)

    def test_text_input_accepted(self, engine, treasury_key, signer_keys):
        envelope = mk_envelope(treasury_key, signer_keys[:1])

        validated = engine.validate_for_creation(encode_text(envelope))

        assert validated.to_text() == encode_text(envelope)

    def test_threshold_met_exactly(self, engine, treasury_key, signer_keys):
        validated = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))

        report = engine.validate_for_publication_readiness(validated)
        assert report.ready
        assert report.collected_weight == 60

    def test_excess_signature_rejected(self, engine, treasury_key, signer_keys):
        with pytest.raises(ExcessSignaturesError):
            engine.validate_for_creation(mk_envelope(treasury_key, signer_keys))

    def test_unauthorized_source_rejected_before_sequence_check(self, engine, ledger):
        with pytest.raises(WrongSourceAccountError):
            engine.validate_for_creation(mk_envelope(mk_key("stranger")))
        assert ledger.calls_to("fetch_next_sequence_number") == []

    def test_muxed_source_rejected(self, engine, ledger, treasury_key):
        with pytest.raises(WrongSourceAccountError):
            engine.validate_for_creation(mk_envelope(treasury_key, muxed_id=7))
        assert ledger.calls == []

    def test_fee_checked_before_time_window(self, engine, treasury_key):
        envelope = mk_envelope(treasury_key, fee=50, time_bounds=(0, NOW + 10))
        with pytest.raises(NonStandardFeeError):
            engine.validate_for_creation(envelope)

    def test_time_window_checked_before_sequence(self, engine, ledger, treasury_key):
        envelope = mk_envelope(treasury_key, sequence=1000, time_bounds=(0, NOW + DAY - 1))
        with pytest.raises(InsufficientTimeWindowError):
            engine.validate_for_creation(envelope)
        assert ledger.calls_to("fetch_next_sequence_number") == []

    def test_stale_sequence_rejected(self, engine, treasury_key):
        with pytest.raises(StaleSequenceError):
            engine.validate_for_creation(mk_envelope(treasury_key, sequence=999))

    def test_foreign_signature_rejected(self, engine, treasury_key, signer_keys):
        envelope = mk_envelope(treasury_key, [signer_keys[0], mk_key("outsider")])
        with pytest.raises(InvalidSignatureError):
            engine.validate_for_creation(envelope)

    def test_malformed_input_rejected(self, engine, ledger):
        with pytest.raises(DecodeError):
            engine.validate_for_creation(b"\x00\x00\x00\x02\x00")
        assert ledger.calls == []

    def test_fetch_failure_propagates(self, engine, ledger, treasury_key):
        ledger.failure = FetchTimeoutError()

        with pytest.raises(FetchTimeoutError) as exc_info:
            engine.validate_for_creation(mk_envelope(treasury_key))
        assert ErrorHandler.is_retryable(exc_info.value)

    def test_signer_set_read_fresh_each_time(self, engine, ledger, treasury_key, signer_keys):
        engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))

        # Signer weights raised between calls: three signatures are now needed
        ledger.add_account(treasury_key, [(k, 30) for k in signer_keys], high_threshold=90)
        validated = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys))

        assert len(validated.envelope.signatures) == 3


class TestPublicationReadiness:

    def test_under_signed_not_ready(self, engine, treasury_key, signer_keys):
        validated = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:1]))

        report = engine.validate_for_publication_readiness(validated)

        assert not report.ready
        assert report.collected_weight == 30
        assert report.missing_weight == 30
        assert report.required_threshold == 60
        assert report.identifier == validated.hex_id
        assert [m.is_signed for m in report.signers] == [True, False, False]

    def test_removed_signer_no_longer_counts(self, engine, ledger, treasury_key, signer_keys):
        validated = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))
        ledger.add_account(treasury_key, [(k, 30) for k in signer_keys[1:]], high_threshold=60)

        report = engine.validate_for_publication_readiness(validated)

        assert report.collected_weight == 30
        assert report.unmatched_signatures == 1
        assert not report.ready

    def test_raw_envelope_refused(self, engine, treasury_key):
        with pytest.raises(TypeError):
            engine.validate_for_publication_readiness(mk_envelope(treasury_key))


class TestValidateForUpdate:

    @pytest.fixture
    def stored(self, engine, treasury_key, signer_keys):
        return engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:1]))

    def test_added_signature_accepted(self, engine, stored, treasury_key, signer_keys):
        candidate = mk_envelope(treasury_key, signer_keys[:2])

        updated = engine.validate_for_update(stored, candidate)

        assert updated.purpose == Purpose.UPDATE
        assert updated.identifier == stored.identifier
        assert updated.envelope == candidate

    def test_removed_signature_rejected(self, engine, treasury_key, signer_keys):
        stored = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))
        with pytest.raises(SignatureRemovedError):
            engine.validate_for_update(stored, mk_envelope(treasury_key, signer_keys[1:2]))

    def test_changed_body_rejected(self, engine, stored, treasury_key, signer_keys):
        candidate = mk_envelope(treasury_key, signer_keys[:2], amount="11")
        with pytest.raises(ContentChangedError):
            engine.validate_for_update(stored, candidate)

    def test_identical_resubmission_rejected(self, engine, stored):
        with pytest.raises(NotChangedError):
            engine.validate_for_update(stored, stored.to_bytes())

    def test_superfluous_signature_rejected(self, engine, treasury_key, signer_keys):
        stored = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))
        with pytest.raises(ExcessSignaturesError):
            engine.validate_for_update(stored, mk_envelope(treasury_key, signer_keys))

    def test_new_signatures_before_stored_ones_rejected(self, engine, stored, treasury_key, signer_keys):
        # Two new signatures in front of the stored one: 90 of 60 weight
        candidate = mk_envelope(treasury_key, [signer_keys[1], signer_keys[2], signer_keys[0]])

        with pytest.raises(ExcessSignaturesError):
            engine.validate_for_update(stored, candidate)

    def test_reordered_stored_signatures_lose_exemption(self, engine, ledger, treasury_key, signer_keys):
        stored = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))
        # Threshold dropped to 30, third signer kept with weight 0
        ledger.add_account(treasury_key, [(signer_keys[0], 30), (signer_keys[1], 30), (signer_keys[2], 0)],
                           high_threshold=30)

        updated = engine.validate_for_update(stored, mk_envelope(treasury_key, signer_keys))
        assert updated.purpose == Purpose.UPDATE

        reordered = mk_envelope(treasury_key, [signer_keys[1], signer_keys[0], signer_keys[2]])
        with pytest.raises(ExcessSignaturesError):
            engine.validate_for_update(stored, reordered)

    def test_new_signature_excess_after_threshold_drop(
            self, engine, ledger, treasury_key, signer_keys):
        stored = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))
        ledger.add_account(treasury_key, [(k, 30) for k in signer_keys], high_threshold=30)

        # Accepted signatures are exempt, the new one is still superfluous
        with pytest.raises(ExcessSignaturesError):
            engine.validate_for_update(stored, mk_envelope(treasury_key, signer_keys))

    def test_threshold_raise_allows_more_signatures(self, engine, ledger, treasury_key, signer_keys):
        stored = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))
        ledger.add_account(treasury_key, [(k, 30) for k in signer_keys], high_threshold=90)

        updated = engine.validate_for_update(stored, mk_envelope(treasury_key, signer_keys))

        assert engine.validate_for_publication_readiness(updated).ready

    def test_time_window_not_rechecked(self, config, ledger, stored, treasury_key, signer_keys):
        later = ValidationEngine(config, ledger, clock=lambda: NOW + 2 * DAY - 60)
        updated = later.validate_for_update(stored, mk_envelope(treasury_key, signer_keys[:2]))

        assert updated.purpose == Purpose.UPDATE

    def test_stored_must_be_validated(self, engine, treasury_key, signer_keys):
        with pytest.raises(TypeError):
            engine.validate_for_update(mk_envelope(treasury_key), mk_envelope(treasury_key, signer_keys[:1]))


class TestPublication:

    def test_is_published(self, engine, ledger, treasury_key):
        validated = engine.validate_for_creation(mk_envelope(treasury_key))
        assert not engine.is_published(validated)

        ledger.set_transaction(validated.identifier, successful=True)
        assert engine.is_published(validated)

    def test_failed_transaction_not_published(self, engine, ledger, treasury_key):
        validated = engine.validate_for_creation(mk_envelope(treasury_key))
        ledger.set_transaction(validated.identifier, successful=False)
        assert not engine.is_published(validated)

    def test_restore_runs_no_guards(self, engine, ledger, treasury_key):
        # Expired and stale, but restored bodies are trusted
        envelope = mk_envelope(treasury_key, sequence=1, time_bounds=(0, 1))

        restored = engine.restore(encode(envelope), engine.identifier(envelope).hex())

        assert restored.purpose == Purpose.STORED
        assert restored.identifier == engine.identifier(envelope)
        assert restored.source == treasury_key.public_key().to_account_id()
        assert ledger.calls == []

    def test_restore_checks_stored_identifier(self, engine, treasury_key):
        stored = mk_envelope(treasury_key, amount="10")
        swapped = mk_envelope(treasury_key, amount="9999")

        with pytest.raises(ContentChangedError) as exc_info:
            engine.restore(encode(swapped), engine.identifier(stored))
        assert exc_info.value.details["expected"] == engine.identifier(stored).hex()

    def test_unknown_source_account_on_ledger(self, config, treasury_key):
        engine = ValidationEngine(config, FakeLedgerClient(), clock=lambda: NOW)
        with pytest.raises(AccountNotFoundError):
            engine.validate_for_creation(mk_envelope(treasury_key))


class TestHintCollisions:
    """Every treasury signer shares one signature hint."""

    @pytest.fixture(autouse=True)
    def shared_hint(self, monkeypatch):
        monkeypatch.setattr(Ed25519PublicKey, "signature_hint", lambda self: b"\xca\xfe\xba\xbe")

    def test_readiness_counts_only_verified_signers(self, engine, treasury_key, signer_keys):
        validated = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:1]))

        report = engine.validate_for_publication_readiness(validated)

        assert report.collected_weight == 30
        assert not report.ready
        assert [m.signer.public_key for m in report.signers if m.is_signed] == [signer_keys[0].public_key()]

    def test_threshold_reached_by_distinct_signers(self, engine, treasury_key, signer_keys):
        validated = engine.validate_for_creation(mk_envelope(treasury_key, signer_keys[:2]))

        assert engine.validate_for_publication_readiness(validated).ready

    def test_excess_still_detected(self, engine, treasury_key, signer_keys):
        with pytest.raises(ExcessSignaturesError):
            engine.validate_for_creation(mk_envelope(treasury_key, signer_keys))


class TestFromConfig:

    def test_ledger_queries_use_configured_endpoint_and_timeout(self, treasury_key):
        account = treasury_key.public_key().to_account_id()
        config = TreasuryConfig(
            horizon_url="https://horizon-testnet.example.org",
            fetch_timeout=1.5,
            treasury_account=account,
            allowed_source_accounts=[account],
        )
        session = Mock(spec=requests.Session)
        response = Mock(status_code=200)
        response.json.return_value = {"account_id": str(account), "sequence": "1000"}
        session.get.return_value = response

        engine = ValidationEngine.from_config(config, session=session, clock=lambda: NOW)
        engine.validate_for_creation(mk_envelope(treasury_key))

        url = f"https://horizon-testnet.example.org/accounts/{account}"
        session.get.assert_any_call(url, headers={"Accept": "application/json"}, timeout=1.5)
