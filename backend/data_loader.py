import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from config import Settings
from models import Record

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class TableStoreError(Exception):
    def __init__(self, table: str, status: int, body: str = ""):
        detail = f": {body}" if body else ""
        super().__init__(f"Airtable {table} -> {status}{detail}")
        self.table = table
        self.status = status
        self.body = body


def _quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


class AirtableClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.settings.airtable_api_url}/{self.settings.airtable_base_id}",
            headers={"Authorization": f"Bearer {self.settings.airtable_token}"},
            timeout=self.settings.airtable_timeout,
            transport=self.transport,
        )

    async def _get(self, http: httpx.AsyncClient, table: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            res = await http.get(f"/{table}", params=params)
        except httpx.HTTPError as e:
            raise TableStoreError(table, 0, str(e) or type(e).__name__) from e
        if res.status_code < 200 or res.status_code >= 300:
            raise TableStoreError(table, res.status_code, res.text)
        try:
            return res.json()
        except ValueError as e:
            raise TableStoreError(table, res.status_code, f"invalid JSON: {e}") from e

    async def list_records(
        self,
        table: str,
        view: Optional[str] = None,
        slug: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
    ) -> List[Record]:
        """Fetches every page of a table, flattening each record to {"id": ..., **fields}."""
        if http is None:
            async with self._client() as own:
                return await self.list_records(table, view=view, slug=slug, http=own)

        params: Dict[str, Any] = {"pageSize": PAGE_SIZE}
        if view:
            params["view"] = view
        if slug:
            params["filterByFormula"] = f"{{RestoranSlug}}={_quote(slug)}"

        records: List[Record] = []
        while True:
            data = await self._get(http, table, params)
            for r in data.get("records") or []:
                records.append({"id": r.get("id"), **(r.get("fields") or {})})
            offset = data.get("offset")
            if not offset:
                return records
            params = {**params, "offset": offset}

    async def get_venue(self, slug: str, http: Optional[httpx.AsyncClient] = None) -> Optional[Record]:
        if http is None:
            async with self._client() as own:
                return await self.get_venue(slug, http=own)

        table = self.settings.tables["venue"]
        params = {"filterByFormula": f"{{slug}}={_quote(slug)}", "maxRecords": 1}
        data = await self._get(http, table, params)
        records = data.get("records") or []
        if not records:
            return None
        return records[0].get("fields") or None

    async def _optional(self, coro, table: str) -> List[Record]:
        try:
            return await coro
        except (TableStoreError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"Optional table {table} unavailable, using empty list: {e}")
            return []

    async def load_restaurant_bundle(self, slug: str) -> Tuple[Optional[Record], Dict[str, List[Record]]]:
        """
        Loads the venue profile and every category collection concurrently.
        Optional categories degrade to an empty list; any other failure propagates.
        """
        tables = self.settings.tables
        categories = [c for c in tables if c != "venue"]

        async with self._client() as http:
            fetches = []
            for category in categories:
                coro = self.list_records(tables[category], view=self.settings.view, slug=slug, http=http)
                if category in self.settings.optional_tables:
                    coro = self._optional(coro, tables[category])
                fetches.append(coro)
            results = await asyncio.gather(self.get_venue(slug, http=http), *fetches, return_exceptions=True)

        for result in results:
            if isinstance(result, BaseException):
                raise result
        venue, *collections = results
        return venue, dict(zip(categories, collections))
