"""Vacancy API URL builders and pagination helpers.

Pure functions with no network dependency.
"""

from urllib.parse import quote, quote_plus, urlencode


def build_search_url(
    api_base: str,
    text: str,
    *,
    area_id: str | None = None,
    page: int = 0,
    per_page: int = 50,
    host: str | None = None,
) -> str:
    """Build an API vacancy search URL.

    ``host`` selects which site's catalogue the API searches (hh.ru, hh.kz, ...).
    """
    params: dict[str, str] = {}
    if text:
        params["text"] = text
    if area_id:
        params["area"] = str(area_id)
    params["per_page"] = str(per_page)
    params["page"] = str(page)
    if host:
        params["host"] = host
    return f"{api_base}/vacancies?{urlencode(params, quote_via=quote_plus)}"


def build_vacancy_url(api_base: str, vacancy_id: str) -> str:
    """Build an API vacancy detail URL."""
    return f"{api_base}/vacancies/{quote(str(vacancy_id), safe='')}"


def build_public_search_url(host: str, text: str, area_id: str | None = None) -> str:
    """Build the site search URL a person would open in a browser."""
    params: dict[str, str] = {"text": text}
    if area_id:
        params["area"] = str(area_id)
    return f"https://{host}/search/vacancy?{urlencode(params, quote_via=quote_plus)}"


def should_stop_pagination(page: int, pages: int | None, ids_on_page: int) -> bool:
    """Return True when ``page`` is the last page the API reports (or came back empty)."""
    if ids_on_page == 0:
        return True
    return pages is not None and page >= pages - 1
