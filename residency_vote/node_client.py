# residency_vote/node_client.py
# Queries against the node's JSON interface. Every failure surfaces as NodeAccessError.
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from residency_vote.config import NODE_TIMEOUT_SECONDS, NODE_URL
from residency_vote.exceptions import NodeAccessError
from residency_vote.models.address_model import AccountAddress

logger = logging.getLogger(__name__)

CREDENTIAL_INITIAL = "initial"
CREDENTIAL_NORMAL = "normal"


@dataclass
class AccountCredential:
    """An account credential without its proofs."""
    kind: str
    cred_id: bytes
    commitments: Optional[Dict[str, Any]] = field(default=None)


def parse_account_credential(data: Dict[str, Any]) -> AccountCredential:
    # Credentials are versioned: {"v": 0, "value": {"type": ..., "contents": ...}}
    value = data.get("value", data)
    kind = value.get("type")
    contents = value.get("contents") or {}
    if kind == CREDENTIAL_INITIAL:
        return AccountCredential(kind=kind, cred_id=bytes.fromhex(contents["regId"]))
    if kind == CREDENTIAL_NORMAL:
        return AccountCredential(
            kind=kind,
            cred_id=bytes.fromhex(contents["credId"]),
            commitments=contents["commitments"],
        )
    raise ValueError(f"unknown credential type: {kind!r}")


class NodeClient:
    def __init__(self, base_url: str = NODE_URL, timeout: float = NODE_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Node query {url} failed: {e}")
            raise NodeAccessError(e)
        except ValueError as e:
            logger.error(f"Node returned invalid JSON for {url}: {e}")
            raise NodeAccessError(e)

    def get_account_credential(self, address: AccountAddress, index: int = 0) -> Optional[AccountCredential]:
        """
        Returns the credential stored at `index` in the last finalized block,
        or None when the account has no credential at that index.
        """
        info = self._get_json(f"/v2/accounts/{address}/info")
        credentials = info.get("accountCredentials") or {}
        data = credentials.get(str(index))
        if data is None:
            return None
        try:
            return parse_account_credential(data)
        except (KeyError, ValueError, AttributeError) as e:
            raise NodeAccessError(f"malformed credential: {e}")

    def get_cryptographic_parameters(self) -> Dict[str, Any]:
        return self._get_json("/v2/cryptographic-parameters")
