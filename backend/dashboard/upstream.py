from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from .schemas import GameBucket, MonthlyActivity, TopGame, TopScoresResponse, WalletCount

log = logging.getLogger(__name__)

_top_games_adapter = TypeAdapter(list[TopGame])


class UpstreamError(Exception):
    """The metrics API could not be reached or sent something unusable."""


class UpstreamClient:
    """
    Read-only client for the pre-aggregated metrics API. Every call fetches a
    fresh snapshot; nothing is cached or retried here.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get_json(self, path: str) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(path)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            log.warning("Upstream GET %s failed: %s", path, e)
            raise UpstreamError(f"GET {path} failed") from e
        except ValueError as e:
            log.warning("Upstream GET %s returned invalid JSON: %s", path, e)
            raise UpstreamError(f"GET {path} returned invalid JSON") from e

    async def top_scores(self) -> list[GameBucket]:
        raw = await self._get_json("/activity/top-scores")
        if not raw:
            return []
        try:
            return list(TopScoresResponse.model_validate(raw).data)
        except ValidationError as e:
            log.warning("Unexpected top-scores payload: %s", e)
            raise UpstreamError("unexpected top-scores payload") from e

    async def monthly_activity(self, month: int, year: int) -> MonthlyActivity:
        raw = await self._get_json(f"/activity/totalMonthlyActivity/{month}/{year}")
        try:
            return MonthlyActivity.model_validate(raw)
        except ValidationError as e:
            log.warning("Unexpected monthly activity payload: %s", e)
            raise UpstreamError("unexpected monthly activity payload") from e

    async def wallet_count(self) -> WalletCount:
        raw = await self._get_json("/web3-wallets/count")
        try:
            return WalletCount.model_validate(raw)
        except ValidationError as e:
            log.warning("Unexpected wallet count payload: %s", e)
            raise UpstreamError("unexpected wallet count payload") from e

    async def top_games(self) -> list[TopGame]:
        raw = await self._get_json("/activity/top-games")
        try:
            return _top_games_adapter.validate_python(raw or [])
        except ValidationError as e:
            log.warning("Unexpected top-games payload: %s", e)
            raise UpstreamError("unexpected top-games payload") from e
