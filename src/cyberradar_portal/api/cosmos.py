import base64
import hashlib
import hmac
import json
from email.utils import formatdate
from typing import Any
from urllib.parse import quote

import structlog

from cyberradar_portal.api.base import ServiceClient
from cyberradar_portal.api.models import SqlQuerySpec

logger = structlog.get_logger(__name__)


class CosmosAlertStore(ServiceClient):
    """Client for the Cosmos DB SQL REST API, scoped to one container.

    Queries and writes go to:
    POST /dbs/{database}/colls/{container}/docs

    Authentication uses the account master key (HMAC-SHA256 over verb,
    resource type, resource link and date). Query results are paged through
    the ``x-ms-continuation`` header.
    """

    API_VERSION = "2018-12-31"
    PAGE_SIZE = 1000

    def __init__(
        self,
        endpoint: str,
        key: str,
        database: str = "cyberradar",
        container: str = "raw_alerts",
        timeout: float = 30.0,
    ) -> None:
        super().__init__(endpoint, timeout=timeout)
        self.key = key
        self.database = database
        self.container = container

    @property
    def collection_link(self) -> str:
        return f"dbs/{self.database}/colls/{self.container}"

    def _headers(self, method: str, path: str) -> dict[str, str]:
        date = formatdate(usegmt=True)
        return {
            "Authorization": self.auth_token(method, "docs", self.collection_link, date),
            "x-ms-date": date,
            "x-ms-version": self.API_VERSION,
            "Accept": "application/json",
        }

    def auth_token(self, verb: str, resource_type: str, resource_link: str, date: str) -> str:
        payload = f"{verb.lower()}\n{resource_type.lower()}\n{resource_link}\n{date.lower()}\n\n"
        digest = hmac.new(
            base64.b64decode(self.key), payload.encode("utf-8"), hashlib.sha256
        ).digest()
        signature = base64.b64encode(digest).decode("ascii")
        return quote(f"type=master&ver=1.0&sig={signature}", safe="")

    async def query_documents(self, spec: SqlQuerySpec) -> list[dict[str, Any]]:
        """Run a parameterized query across partitions and return every row."""
        path = f"/{self.collection_link}/docs"
        body = {"query": spec.query, "parameters": spec.parameter_list()}

        documents: list[dict[str, Any]] = []
        continuation: str | None = None
        while True:
            headers = {
                "Content-Type": "application/query+json",
                "x-ms-documentdb-isquery": "True",
                "x-ms-documentdb-query-enablecrosspartition": "True",
                "x-ms-max-item-count": str(self.PAGE_SIZE),
            }
            if continuation:
                headers["x-ms-continuation"] = continuation

            response = await self._request("POST", path, json=body, headers=headers)
            data = response.json()
            documents.extend(data.get("Documents", []))

            continuation = response.headers.get("x-ms-continuation")
            if not continuation:
                break

        logger.debug("cosmos_query", container=self.container, rows=len(documents))
        return documents

    async def create_document(
        self, document: dict[str, Any], partition_key: str, upsert: bool = False
    ) -> dict[str, Any]:
        """Create ``document`` in its partition, or replace it when ``upsert`` is set."""
        path = f"/{self.collection_link}/docs"
        headers = {
            "Content-Type": "application/json",
            "x-ms-documentdb-partitionkey": json.dumps([partition_key]),
        }
        if upsert:
            headers["x-ms-documentdb-is-upsert"] = "True"

        response = await self._request("POST", path, json=document, headers=headers)
        logger.debug(
            "cosmos_write", container=self.container, id=document.get("id"), upsert=upsert
        )
        return response.json()
