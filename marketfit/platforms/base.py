"""Abstract base class for vacancy sources."""

from abc import ABC, abstractmethod
from typing import Any

from marketfit.core.schemas import SearchPage


class VacancySource(ABC):
    """A job board the aggregator can search and read vacancy details from."""

    @property
    @abstractmethod
    def platform_id(self) -> str:
        """Unique identifier for this source (e.g. 'hh')."""

    @property
    @abstractmethod
    def host(self) -> str:
        """Public site host used for human-facing search links."""

    @abstractmethod
    async def search_page(
        self,
        text: str,
        *,
        area_id: str | None = None,
        page: int = 0,
    ) -> SearchPage:
        """Return vacancy ids for one page of a free-text search."""

    @abstractmethod
    async def get_vacancy(self, vacancy_id: str) -> dict[str, Any]:
        """Return the full payload for one vacancy."""

    @abstractmethod
    def public_search_url(self, text: str, area_id: str | None = None) -> str:
        """Human-facing search URL for a role."""
