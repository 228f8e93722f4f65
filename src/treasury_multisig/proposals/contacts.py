"""
Signer contact mapping.

Maps signer public keys to notification handles, loaded from a JSON file of
the form {"accounts": [{"pubkey": "G...", "telegram": "@handle"}]}.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ValidationError

from ..runtime.address import AccountId
from ..signers.directory import SignerRecord


class ContactsError(Exception):
    """Contact mapping could not be loaded."""
    pass


class ContactEntry(BaseModel):
    pubkey: AccountId
    telegram: str


class ContactFile(BaseModel):
    accounts: List[ContactEntry]


class SignerContacts:
    """Lookup of notification handles by signer account."""

    def __init__(self, mapping: Optional[Dict[AccountId, str]] = None):
        self._mapping: Dict[AccountId, str] = dict(mapping or {})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> SignerContacts:
        """
        Raises:
            ContactsError: If the file is missing, not JSON or holds invalid keys
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = ContactFile.model_validate(json.load(f))
        except OSError as e:
            raise ContactsError(f"IO error: {e}") from e
        except json.JSONDecodeError as e:
            raise ContactsError(f"Failed to decode mapping: {e}") from e
        except ValidationError as e:
            raise ContactsError(f"Invalid mapping entry: {e}") from e
        return cls({entry.pubkey: entry.telegram for entry in data.accounts})

    def handle_for(self, account: Union[AccountId, str]) -> Optional[str]:
        if isinstance(account, str):
            account = AccountId(account)
        return self._mapping.get(account)

    def handles_for(self, signers: Iterable[SignerRecord]) -> Dict[str, str]:
        """Handles of the given signers that have one, keyed by address."""
        result = {}
        for signer in signers:
            handle = self._mapping.get(signer.account_id)
            if handle is not None:
                result[str(signer.account_id)] = handle
        return result

    def __len__(self) -> int:
        return len(self._mapping)
