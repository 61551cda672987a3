"""
Read-only admin views over the event collections.

Collections are fetched whole, newest first, and filtered in memory; the
expected volumes are a few hundred rows per event.
"""
import csv
import io
import structlog

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Sequence

from core.config import settings
from core.events import EVENTS, EventDefinition, display_registration_id
from core.errors import StoreError, UnknownRemoteError
from services.registrations import require_store


log = structlog.get_logger()


def matches_search(record: Mapping[str, Any], term: str, fields: Sequence[str]) -> bool:
    term = (term or "").strip().lower()
    if not term:
        return True
    for name in fields:
        value = record.get(name)
        if value is not None and term in str(value).lower():
            return True
    return False


def filter_records(records: Iterable[Mapping], term: str, fields: Sequence[str]) -> List[Mapping]:
    return [r for r in records if matches_search(r, term, fields)]


def index_by(records: Iterable[Mapping], key: str) -> Dict[Any, Mapping]:
    """First record per key value; records come newest first."""
    index = {}
    for record in records:
        value = record.get(key)
        if value is not None and value not in index:
            index[value] = record
    return index


async def _fetch(store, table: str, order_by: str) -> List[Dict[str, Any]]:
    try:
        return await store.select_matching(table, order_by=order_by, descending=True)
    except StoreError as e:
        log.error("admin.fetch_failed", table=table, error=e.message)
        raise UnknownRemoteError(f"Failed to fetch data: {e.message}") from e


async def list_registrations(store, event: EventDefinition, search: str = "") -> List[Dict[str, Any]]:
    require_store(store)
    registrations = await _fetch(store, event.table, event.timestamp_column)

    submitted = {}
    if event.submissions:
        submissions = await _fetch(store, event.submissions.table, event.submissions.timestamp_column)
        submitted = index_by(submissions, "email_id")

    rows = []
    for reg in filter_records(registrations, search, event.search_fields):
        row = dict(reg)
        row["display_id"] = display_registration_id(event, reg)
        if event.submissions:
            row["has_submission"] = reg.get(event.email_column) in submitted
        rows.append(row)

    log.info("admin.registrations_listed", slug=event.slug, total=len(registrations), shown=len(rows))
    return rows


async def list_submissions(store, event: EventDefinition, search: str = "") -> List[Dict[str, Any]]:
    require_store(store)
    config = event.submissions
    submissions = await _fetch(store, config.table, config.timestamp_column)
    return filter_records(submissions, search, config.search_fields)


async def list_uploads(store, event: EventDefinition, search: str = "") -> List[Dict[str, Any]]:
    require_store(store)
    config = event.uploads
    uploads = await _fetch(store, config.table, config.timestamp_column)

    rows = []
    for upload in filter_records(uploads, search, config.search_fields):
        row = dict(upload)
        row["file_name"] = (upload.get("file_path") or "").split("/")[-1]
        row["file_url"] = store.public_url(settings.STORAGE_BUCKET, upload["file_path"]) if upload.get("file_path") else None
        rows.append(row)
    return rows


def admin_panels() -> List[Dict[str, str]]:
    return [
        {
            "slug": event.slug,
            "name": event.title,
            "description": event.admin_description,
            "link": f"/admin/{event.slug}",
        }
        for event in EVENTS.values()
        if event.admin_description
    ]


def csv_rows(records: Iterable[Mapping], columns: Sequence[str]) -> Iterator[str]:
    """
    Streams the records as CSV, header first, one chunk per row.
    """
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(columns)
    yield buf.getvalue()
    buf.seek(0); buf.truncate(0)

    for record in records:
        writer.writerow(["" if record.get(c) is None else record.get(c) for c in columns])
        yield buf.getvalue()
        buf.seek(0); buf.truncate(0)
