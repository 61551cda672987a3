import asyncio
import structlog
import httpx

from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client
from supabase.client import ClientOptions

from core.config import settings
from core.errors import StoreError


log = structlog.get_logger()

CLIENT_INFO = "dare-events-registration@1.0.0"


class SupabaseStore:
    """
    Adapter over the hosted Supabase project: tables through PostgREST and
    files through Storage. The client is synchronous, so every call runs in a
    worker thread and failures come back as ``StoreError``.
    """

    def __init__(self, client: Client):
        self.client = client

    async def _run(self, op: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except APIError as e:
            log.error("store.error", op=op, code=e.code, error=e.message, details=e.details, hint=e.hint)
            raise StoreError(e.message or str(e), code=e.code, details=e.details) from e
        except httpx.HTTPError as e:
            log.error("store.transport_error", op=op, error=str(e))
            raise StoreError(str(e)) from e

    def _insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        resp = self.client.table(table).insert(record).execute()
        if not resp.data:
            raise StoreError("No data returned from database")
        return resp.data[0]

    def _select(self, table, filters, columns, order_by, descending, limit):
        query = self.client.table(table).select(columns)
        for column, value in filters.items():
            query = query.eq(column, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit:
            query = query.limit(limit)
        return query.execute().data or []

    def _upload(self, bucket: str, path: str, data: bytes, content_type: str):
        try:
            self.client.storage.from_(bucket).upload(
                path=path,
                file=data,
                file_options={"content-type": content_type, "cache-control": "3600", "upsert": "true"},
            )
        except Exception as e:
            # storage errors do not share a base class across client versions
            raise StoreError(getattr(e, "message", None) or str(e),
                             code=str(getattr(e, "code", "") or "") or None) from e

    async def insert_one(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        row = await self._run("insert", self._insert, table, record)
        log.info("store.inserted", table=table)
        return row

    async def select_matching(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        columns: str = "*",
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self._run("select", self._select, table, filters or {}, columns, order_by, descending, limit)

    async def select_one(self, table: str, filters: Dict[str, Any], columns: str = "*") -> Optional[Dict[str, Any]]:
        rows = await self.select_matching(table, filters, columns, limit=1)
        return rows[0] if rows else None

    async def upload_object(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(self._upload, bucket, path, data, content_type)
        except StoreError as e:
            log.error("store.upload_error", bucket=bucket, path=path, error=e.message)
            raise
        log.info("store.uploaded", bucket=bucket, path=path, size=len(data))

    def public_url(self, bucket: str, path: str) -> str:
        return self.client.storage.from_(bucket).get_public_url(path)


def build_store() -> Optional[SupabaseStore]:
    if not settings.store_configured:
        log.warning(
            "store.not_configured",
            supabase_url=bool(settings.SUPABASE_URL),
            supabase_key=bool(settings.SUPABASE_KEY),
        )
        return None

    client = create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_KEY,
        options=ClientOptions(
            schema=settings.SUPABASE_SCHEMA,
            headers={"x-client-info": CLIENT_INFO},
            persist_session=False,
        ),
    )
    log.info("store.initialized", url=settings.SUPABASE_URL)
    return SupabaseStore(client)


store = build_store()


def get_store() -> Optional[SupabaseStore]:
    return store
