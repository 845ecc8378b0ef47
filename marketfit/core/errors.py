"""Exception types shared by the fetch client, aggregator, and fallback chain."""


class UpstreamError(RuntimeError):
    """A vacancy API call finished with a non-2xx status."""

    def __init__(self, status: int, url: str) -> None:
        self.status = status
        self.url = url
        super().__init__(f"HTTP {status} for {url}")

    @property
    def is_transient(self) -> bool:
        return self.status == 429 or 500 <= self.status < 600


class MarketUnavailableError(RuntimeError):
    """Every role search failed, so there is no market sample to score."""


class RecommendationError(RuntimeError):
    """No degradation tier produced a result."""
