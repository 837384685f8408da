"""Ergo Explorer and price API queries."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import httpx

from ergomcp.utils.error_handler import ExplorerError

LOGGER = logging.getLogger(__name__)

EXPLORER_API = "https://api.ergoplatform.com/api/v1"
PRICE_API = "https://api.coingecko.com/api/v3/simple/price?ids=ergo&vs_currencies=usd,eur"

_BLOCK_ID_RE = re.compile(r"^[0-9a-fA-F]{64}$")


class ExplorerClient:
    """Read-only queries against the Ergo Explorer API.

    Every method raises ExplorerError with a "Failed to ..." message on any
    transport, status or payload problem.
    """

    def __init__(
        self,
        api_url: str = EXPLORER_API,
        price_url: str = PRICE_API,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.price_url = price_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def get_address_balance(self, address: str) -> Any:
        """Confirmed balance and tokens held by an address."""
        try:
            return await self._get_json(f"{self.api_url}/addresses/{address}/balance/total")
        except (httpx.HTTPError, ValueError) as e:
            raise ExplorerError(f"Failed to fetch balance for address {address}: {e}") from e

    async def get_transaction_details(self, tx_id: str) -> Any:
        try:
            return await self._get_json(f"{self.api_url}/transactions/{tx_id}")
        except (httpx.HTTPError, ValueError) as e:
            raise ExplorerError(f"Failed to fetch transaction {tx_id}: {e}") from e

    async def get_block_header(self, identifier: str) -> Any:
        """Block header by 64-hex block id, or the block at an integer height."""
        identifier = identifier.strip()
        try:
            if _BLOCK_ID_RE.match(identifier):
                return await self._header_by_id(identifier)
            return await self._block_by_height(identifier)
        except ExplorerError as e:
            raise ExplorerError(f"Failed to fetch block {identifier}: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise ExplorerError(f"Failed to fetch block {identifier}: {e}") from e

    async def _header_by_id(self, block_id: str) -> Any:
        data = await self._get_json(f"{self.api_url}/blocks/{block_id}")
        block = data.get("block") if isinstance(data, dict) else None
        if isinstance(block, dict) and block.get("header"):
            return block["header"]
        if isinstance(data, dict) and data.get("header"):
            return data["header"]
        raise ExplorerError("Invalid block structure received from Explorer")

    async def _block_by_height(self, identifier: str) -> Any:
        try:
            height = int(identifier)
        except ValueError:
            raise ExplorerError("Invalid block identifier. Must be a hash or a height number.") from None

        data = await self._get_json(
            f"{self.api_url}/blocks",
            params={"minHeight": height, "maxHeight": height},
        )
        items = data.get("items") if isinstance(data, dict) else None
        for block in items or []:
            if block.get("height") == height:
                return block
        raise ExplorerError(f"Block not found at height {identifier}")

    async def search_tokens(self, query: str) -> Dict[str, Any]:
        try:
            data = await self._get_json(f"{self.api_url}/tokens/search", params={"query": query})
        except (httpx.HTTPError, ValueError) as e:
            raise ExplorerError(f"Failed to search tokens: {e}") from e
        items = data.get("items") if isinstance(data, dict) else None
        return {"items": items or []}

    async def get_ergo_price(self) -> Any:
        try:
            return await self._get_json(self.price_url)
        except (httpx.HTTPError, ValueError) as e:
            raise ExplorerError(f"Failed to fetch Ergo price: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ExplorerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
