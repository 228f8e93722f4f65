"""
Horizon ledger client.

HTTP client for the Stellar Horizon REST API covering the queries the
validator needs. Every request is bounded by the configured timeout and
transport failures surface as FetchError, distinct from policy rejections.

Example:
    ```python
    with HorizonClient("https://horizon.stellar.org", timeout=4.0) as client:
        account = client.fetch_account("GDX2...")
        print(account.high_threshold)
    ```
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional, Union

import requests
from pydantic import ValidationError

from ..config import TreasuryConfig
from ..runtime.address import AccountId
from ..runtime.errors import AccountNotFoundError, FetchError, FetchTimeoutError
from .client import LedgerAccount, LedgerClient, TransactionStatus

logger = logging.getLogger(__name__)


class HorizonClient(LedgerClient):
    """Ledger client backed by a Horizon server."""

    def __init__(
        self,
        base_url: str = "https://horizon.stellar.org",
        timeout: float = 4.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Horizon client.

        Args:
            base_url: Horizon server URL
            timeout: Request timeout in seconds
            session: Optional requests.Session for connection pooling
        """
        self._base_url = base_url.rstrip('/')
        self._timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: TreasuryConfig,
                    session: Optional[requests.Session] = None) -> HorizonClient:
        """Client for the configured Horizon URL and ledger query timeout."""
        return cls(config.horizon_url, timeout=config.fetch_timeout, session=session)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    def close(self) -> None:
        """Close the HTTP session if owned by this client."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> HorizonClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _get(self, path: str) -> Optional[Dict[str, Any]]:
        """
        GET a Horizon resource.

        Returns:
            Decoded JSON body, or None when the resource does not exist

        Raises:
            FetchTimeoutError: If the request exceeds the timeout
            FetchError: On any other transport or protocol failure
        """
        url = f"{self._base_url}{path}"
        logger.debug(f"GET {url}")
        try:
            response = self._session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise FetchTimeoutError(details={"url": url}, cause=e) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"HTTP request failed: {e}", details={"url": url}, cause=e) from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise FetchError(
                f"HTTP {response.status_code}: {response.reason}",
                details={"url": url, "status": response.status_code},
            )

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise FetchError(f"Invalid JSON response: {e}", details={"url": url}, cause=e) from e

    def fetch_account(self, account_id: Union[AccountId, str]) -> LedgerAccount:
        data = self._get(f"/accounts/{account_id}")
        if data is None:
            raise AccountNotFoundError(details={"account": str(account_id)})
        try:
            return LedgerAccount.model_validate(data)
        except ValidationError as e:
            raise FetchError("Malformed account response", details={"account": str(account_id)},
                             cause=e) from e

    def fetch_next_sequence_number(self, account_id: Union[AccountId, str]) -> int:
        return self.fetch_account(account_id).sequence + 1

    def query_transaction_status(self, identifier: Union[bytes, str]) -> TransactionStatus:
        tx_hash = identifier.hex() if isinstance(identifier, (bytes, bytearray)) else identifier
        data = self._get(f"/transactions/{tx_hash}")
        if data is None:
            return TransactionStatus(found=False, successful=False)
        return TransactionStatus(found=True, successful=bool(data.get("successful", False)))
