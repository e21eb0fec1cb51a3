"""Latest block height from a Neutron Tendermint RPC node."""

from __future__ import annotations

import logging

from covenant_validator.clients.http import ApiClient, is_uint_string
from covenant_validator.errors import CollaboratorError

logger = logging.getLogger(__name__)


class NeutronClient:
    def __init__(self, api: ApiClient, rpc_url: str) -> None:
        self.api = api
        self.rpc_url = rpc_url.rstrip("/")

    def get_latest_block_height(self) -> int:
        url = f"{self.rpc_url}/block"
        body = self.api.get_json(url)
        try:
            height = body["result"]["block"]["header"]["height"]
        except (KeyError, TypeError) as e:
            raise CollaboratorError("Block response has no header height", url) from e
        if not isinstance(height, (str, int)) or not is_uint_string(str(height)):
            raise CollaboratorError(f"Error parsing block height: {height!r}", url)
        logger.debug("Latest neutron block: %s", height)
        return int(height)
