# bidprice/services.py
"""Import and export orchestration on top of the parser, serializer and store."""
import math
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from . import crud
from .errors import BatchInsertError, NothingToExport
from .export import export_filename, export_to_master_format
from .importer import parse_import_file
from .schemas import ImportResult, ListingRecord
from .settings import DEDUP_POLICY, INSERT_BATCH_SIZE
from .utils import file_hash, logger

NO_ITEMS_MESSAGE = "No items found in file. Make sure the file has 'Ended' rows."


class ListingIdDedup:
    """Skip listings whose id is already stored; the rest of the file is imported."""
    name = "listing_id"

    def filter(self, db: Session, data: bytes, records: List[ListingRecord]) -> Tuple[List[ListingRecord], Optional[str]]:
        existing = crud.existing_listing_ids(db, (r.listing_id for r in records))
        fresh = []
        for record in records:
            if record.listing_id in existing:
                continue
            # a listing repeated within one file is stored once
            existing.add(record.listing_id)
            fresh.append(record)
        return fresh, None

    def record(self, db: Session, data: bytes, filename: Optional[str], inserted: int):
        pass


class FileHashDedup:
    """Reject a file outright when the same bytes were imported before."""
    name = "file_hash"

    def filter(self, db: Session, data: bytes, records: List[ListingRecord]) -> Tuple[List[ListingRecord], Optional[str]]:
        log = crud.get_import_log(db, file_hash(data))
        if log:
            return [], f"This file was already imported ({log.file_name or 'unnamed'}, {log.item_count} items). Nothing to import."
        return list(records), None

    def record(self, db: Session, data: bytes, filename: Optional[str], inserted: int):
        crud.record_import(db, file_hash(data), filename, inserted)


DEDUP_POLICIES = {
    ListingIdDedup.name: ListingIdDedup,
    FileHashDedup.name: FileHashDedup,
}

def get_dedup_policy(name: str = DEDUP_POLICY):
    try:
        return DEDUP_POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown DEDUP_POLICY {name!r}; expected one of {sorted(DEDUP_POLICIES)}") from None


def import_file(
    db: Session,
    data: bytes,
    filename: Optional[str] = None,
    policy=None,
    batch_size: int = INSERT_BATCH_SIZE,
    now: Optional[datetime] = None,
) -> ImportResult:
    """Parse an uploaded workbook, drop duplicates and store the new listings.

    Store failures do not raise: the result reports how many rows made it in
    and which batch failed.
    """
    policy = policy or get_dedup_policy()
    records = parse_import_file(data, filename, now=now)
    result = ImportResult(file_name=filename, found=len(records))
    if not records:
        result.message = NO_ITEMS_MESSAGE
        return result

    fresh, rejection = policy.filter(db, data, records)
    result.skipped = len(records) - len(fresh)
    if not fresh:
        result.message = rejection or f"All {len(records)} items already exist. Nothing to import."
        logger.info("Import of %s skipped: %s", filename, result.message)
        return result

    result.batches = math.ceil(len(fresh) / batch_size)
    try:
        result.inserted = crud.insert_listings(db, fresh, batch_size=batch_size)
    except BatchInsertError as e:
        result.inserted = e.inserted
        result.error = e.message
        result.message = f"Imported {e.inserted} of {len(fresh)} items; error at batch {e.batch_index}: {e.message}"
        logger.error("Import of %s failed at batch %d/%d: %s", filename, e.batch_index, result.batches, e.message)
        return result

    policy.record(db, data, filename, result.inserted)
    result.message = f"Imported {result.inserted} new items."
    if result.skipped:
        result.message += f" {result.skipped} duplicates skipped."
    logger.info("Imported %d listings from %s (%d skipped, policy=%s)", result.inserted, filename, result.skipped, policy.name)
    return result


def export_listings(db: Session, filters: Optional[Dict] = None) -> Tuple[str, bytes, int]:
    """Build the master workbook for every listing matching ``filters``.

    Returns ``(filename, xlsx_bytes, row_count)``.
    """
    rows = crud.all_listings(db, filters)
    if not rows:
        raise NothingToExport("No data to export.")
    data = export_to_master_format(rows)
    logger.info("Exported %d listings", len(rows))
    return export_filename(), data, len(rows)
