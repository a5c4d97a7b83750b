import logging
from decimal import Decimal
from typing import Any, Mapping, Optional
from urllib.parse import urljoin

import requests
from dotenv import load_dotenv

from ..config import settings
from ..errors import LedgerError

logger = logging.getLogger(__name__)


class LedgerClient:
    """HTTP client for the external Balance Ledger service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        load_dotenv()
        url = base_url or settings.LEDGER_BASE_URL
        if not url:
            raise ValueError("Environment variable 'LEDGER_BASE_URL' is not set")

        self.base_url = url.rstrip("/")
        self.token = token or settings.LEDGER_API_TOKEN
        self.timeout = timeout if timeout is not None else settings.LEDGER_TIMEOUT
        self.session = session or requests.Session()

    # -------- headers --------
    @property
    def headers(self) -> Mapping[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    # -------- core request --------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        try:
            r = self.session.request(
                method=method.upper(),
                url=url,
                headers=self.headers,
                params=params,
                json=json,
                timeout=self.timeout,
            )
            r.raise_for_status()
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            raise LedgerError(f"Ledger rejected {method} {path}: {e}", status) from e
        except requests.RequestException as e:
            raise LedgerError(f"Ledger request {method} {path} failed: {e}") from e
        return r.json() if r.content else None

    # -------- API callers --------
    def credit(self, ticket_id: int, amount: Decimal) -> Optional[str]:
        """Post one credit instruction and return the ledger's reference."""
        # Never log the bearer token
        logger.debug("Posting ledger credit for ticket %s", ticket_id)
        response = self._request(
            "POST",
            "/api/v1/credits",
            json={"ticket_id": ticket_id, "amount": str(amount)},
        )
        if isinstance(response, dict):
            reference = response.get("reference") or response.get("id")
            return str(reference) if reference is not None else None
        return None

    def get_credit(self, reference: str) -> dict:
        """Look up a credit by reference, used during manual reconciliation."""
        return self._request("GET", f"/api/v1/credits/{reference}")
