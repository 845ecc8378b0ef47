"""HeadHunter vacancy API adapter: URL builders and parser over the cached fetch client."""

import logging
from typing import Any

from marketfit.core.config import MarketConfig
from marketfit.core.schemas import SearchPage
from marketfit.platforms.base import VacancySource
from marketfit.platforms.hh.client import JsonFetcher
from marketfit.platforms.hh.parser import parse_search_page
from marketfit.platforms.hh.searcher import (
    build_public_search_url,
    build_search_url,
    build_vacancy_url,
)

logger = logging.getLogger(__name__)


def api_headers(config: MarketConfig, language: str = "ru") -> dict[str, str]:
    """Headers the vacancy API expects on every call."""
    return {
        "User-Agent": config.user_agent,
        "HH-User-Agent": config.user_agent,
        "Accept": "application/json",
        "Accept-Language": language,
    }


class HHAdapter(VacancySource):
    """Vacancy source backed by the public HeadHunter API.

    All reads go through the cached fetcher, so identical searches within the
    cache TTL cost nothing.
    """

    def __init__(self, fetcher: JsonFetcher, config: MarketConfig) -> None:
        self._fetcher = fetcher
        self._config = config

    @property
    def platform_id(self) -> str:
        return "hh"

    @property
    def host(self) -> str:
        return self._config.host

    async def search_page(
        self,
        text: str,
        *,
        area_id: str | None = None,
        page: int = 0,
    ) -> SearchPage:
        url = build_search_url(
            self._config.api_base,
            text,
            area_id=area_id,
            page=page,
            per_page=self._config.per_page,
            host=self._config.host,
        )
        logger.debug("Search page %d for '%s': %s", page, text, url)
        payload = await self._fetcher.get_json_cached(url)
        return parse_search_page(payload)

    async def get_vacancy(self, vacancy_id: str) -> dict[str, Any]:
        payload = await self._fetcher.get_json_cached(
            build_vacancy_url(self._config.api_base, vacancy_id),
        )
        if not isinstance(payload, dict):
            msg = f"Unexpected vacancy payload for {vacancy_id}: {type(payload).__name__}"
            raise ValueError(msg)
        return payload

    def public_search_url(self, text: str, area_id: str | None = None) -> str:
        return build_public_search_url(self._config.host, text, area_id)
