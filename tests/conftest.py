"""
Shared fixtures: a treasury account with three 30-weight signers and a
threshold of 60, served by an in-memory ledger.
"""

import sys
import pathlib

import pytest

# Ensure helpers are importable when pytest runs without the ini pythonpath
TESTS_DIR = pathlib.Path(__file__).parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from helpers import FakeLedgerClient, NOW, mk_key  # noqa: E402

from treasury_multisig.codec import TESTNET_NETWORK_PASSPHRASE  # noqa: E402
from treasury_multisig.config import TreasuryConfig  # noqa: E402
from treasury_multisig.engine import ValidationEngine  # noqa: E402


@pytest.fixture
def treasury_key():
    return mk_key("treasury")


@pytest.fixture
def signer_keys():
    """Three treasury signers, 30 weight each."""
    return [mk_key(f"signer-{i}") for i in range(3)]


@pytest.fixture
def idle_key():
    """Signer listed on the treasury with zero weight."""
    return mk_key("idle")


@pytest.fixture
def ledger(treasury_key, signer_keys, idle_key):
    fake = FakeLedgerClient()
    fake.add_account(
        treasury_key,
        signers=[(treasury_key, 0)] + [(k, 30) for k in signer_keys] + [(idle_key, 0)],
        high_threshold=60,
        sequence=1000,
    )
    return fake


@pytest.fixture
def config(treasury_key):
    account = treasury_key.public_key().to_account_id()
    return TreasuryConfig(
        network_passphrase=TESTNET_NETWORK_PASSPHRASE,
        treasury_account=account,
        allowed_source_accounts=[account],
    )


@pytest.fixture
def engine(config, ledger):
    return ValidationEngine(config, ledger, clock=lambda: NOW)
