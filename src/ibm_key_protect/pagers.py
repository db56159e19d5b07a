"""Pagers for paginated list operations."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

from .key_protect_v2 import KeyProtectV2


class GetGovernanceConfigPager:
    """Iterate over ``get_governance_config`` results page by page."""

    def __init__(self, client: KeyProtectV2, **params: Any) -> None:
        self._client = client
        self._params: Dict[str, Any] = dict(params)
        self._has_next = True
        self._page_context: Dict[str, Optional[int]] = {"next": None}

    def has_next(self) -> bool:
        return self._has_next

    async def get_next(self) -> List[Dict[str, Any]]:
        if not self._has_next:
            raise RuntimeError("No more results available")

        params = dict(self._params)
        params["offset"] = self._page_context["next"]
        response = await self._client.get_governance_config(**params)
        result = response.get_result() or {}

        next_offset = _next_offset(result)
        self._page_context["next"] = next_offset
        if next_offset is None:
            self._has_next = False
        return result.get("config_state") or []

    async def get_all(self) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        while self.has_next():
            results.extend(await self.get_next())
        return results


def _next_offset(result: Dict[str, Any]) -> Optional[int]:
    href = (result.get("next") or {}).get("href")
    if not href:
        return None
    values = parse_qs(urlparse(href).query).get("offset")
    if not values:
        return None
    return int(values[0])
