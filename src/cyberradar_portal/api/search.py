from typing import Any

from cyberradar_portal.api.base import ServiceClient
from cyberradar_portal.api.models import SearchPage


def severity_filter(severity: str) -> str:
    """OData equality filter on ``severity`` with quotes escaped."""
    escaped = severity.strip().replace("'", "''")
    return f"severity eq '{escaped}'"


class AlertSearchClient(ServiceClient):
    """Client for the Azure AI Search documents API.

    Full-text queries go to:
    POST /indexes/{index}/docs/search?api-version=...
    """

    API_VERSION = "2023-11-01"

    def __init__(self, endpoint: str, index: str, api_key: str, timeout: float = 30.0) -> None:
        super().__init__(endpoint, timeout=timeout)
        self.index = index
        self.api_key = api_key

    def _headers(self, method: str, path: str) -> dict[str, str]:
        return {"api-key": self.api_key, "Content-Type": "application/json"}

    async def _search(self, body: dict[str, Any]) -> dict[str, Any]:
        response = await self._request(
            "POST",
            f"/indexes/{self.index}/docs/search",
            json={key: value for key, value in body.items() if value is not None},
            params={"api-version": self.API_VERSION},
        )
        return response.json()

    async def search(
        self,
        text: str,
        top: int = 20,
        skip: int = 0,
        filter: str | None = None,
        orderby: str | None = None,
    ) -> SearchPage:
        """Full-text search over the alert index.

        Returns the matching documents with the index's total hit count, or
        the number of returned documents when the service omits it.
        """
        data = await self._search(
            {
                "search": text,
                "top": top,
                "skip": skip,
                "count": True,
                "filter": filter,
                "orderby": orderby,
                "queryType": "simple",
                "searchMode": "any",
            }
        )
        results = tuple(_strip_search_metadata(doc) for doc in data.get("value", []))
        return SearchPage(results=results, total=data.get("@odata.count") or len(results))

    async def semantic_search(
        self,
        text: str,
        top: int = 5,
        filter: str | None = None,
        search_mode: str = "any",
        scoring_profile: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch the few most relevant alerts as context for the analyst chat."""
        data = await self._search(
            {
                "search": text,
                "top": top,
                "count": False,
                "filter": filter,
                "queryType": "simple",
                "searchMode": search_mode,
                "scoringProfile": scoring_profile or None,
            }
        )
        return [_strip_search_metadata(doc) for doc in data.get("value", [])]


def _strip_search_metadata(document: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in document.items() if not key.startswith("@search.")}
