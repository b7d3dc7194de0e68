# bidprice/crud.py
"""Store helpers for ``CarListing`` and ``ImportLog`` rows.

Filtering, ordering, pagination and counting for the listing table live
here, together with the chunked insert used by imports and the review
edits (update/delete) of a single listing.
"""
from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from .errors import BatchInsertError
from .models import CarListing, ImportLog
from .schemas import ListingRecord
from .settings import INSERT_BATCH_SIZE
from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional, Sequence

DEFAULT_ORDER = (CarListing.brand.asc(), CarListing.model.asc(), CarListing.year.desc())

def insert_listings(db: Session, records: Sequence[ListingRecord], batch_size: int = INSERT_BATCH_SIZE) -> int:
    """Insert records in chunks, committing after each chunk.

    A rejected chunk is rolled back on its own; earlier chunks stay committed
    and are reported through ``BatchInsertError.inserted``.
    """
    inserted = 0
    for index, start in enumerate(range(0, len(records), batch_size), start=1):
        batch = records[start:start + batch_size]
        try:
            db.add_all([CarListing(**r.model_dump()) for r in batch])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise BatchInsertError(index, inserted, str(e.__cause__ or e)) from e
        inserted += len(batch)
    return inserted

def existing_listing_ids(db: Session, listing_ids: Iterable[str]) -> set:
    ids = list(set(listing_ids))
    if not ids:
        return set()
    rows = db.execute(select(CarListing.listing_id).where(CarListing.listing_id.in_(ids)))
    return {r[0] for r in rows}

def get_import_log(db: Session, file_hash: str):
    return db.query(ImportLog).filter(ImportLog.file_hash == file_hash).first()

def record_import(db: Session, file_hash: str, file_name: Optional[str], item_count: int):
    log = ImportLog(file_hash=file_hash, file_name=file_name, item_count=item_count)
    db.add(log)
    db.commit()
    return log

def _filtered(db: Session, filters: Optional[Dict] = None):
    q = db.query(CarListing)
    if filters:
        conds = []
        if filters.get("brand"):
            conds.append(CarListing.brand == filters["brand"])
        if filters.get("model"):
            conds.append(CarListing.model == filters["model"])
        if filters.get("import_date"):
            conds.append(CarListing.import_date == filters["import_date"])
        if filters.get("min_year") is not None:
            conds.append(CarListing.year >= filters["min_year"])
        if filters.get("max_year") is not None:
            conds.append(CarListing.year <= filters["max_year"])
        if filters.get("min_price") is not None:
            conds.append(CarListing.price >= filters["min_price"])
        if filters.get("max_price") is not None:
            conds.append(CarListing.price <= filters["max_price"])
        if filters.get("has_bid") is not None:
            conds.append(CarListing.has_bid == filters["has_bid"])
        if conds:
            q = q.filter(and_(*conds))
    return q

def count_listings(db: Session, filters: Optional[Dict] = None) -> int:
    return _filtered(db, filters).count()

def list_listings(db: Session, skip: int = 0, limit: int = 50, filters: Optional[Dict] = None, order=DEFAULT_ORDER):
    q = _filtered(db, filters)
    total = q.count()
    items = q.order_by(*order, CarListing.id).offset(skip).limit(limit).all()
    return {"total": total, "items": items}

def all_listings(db: Session, filters: Optional[Dict] = None, order=DEFAULT_ORDER) -> List[CarListing]:
    """Every matching row in display order, without pagination (export path)."""
    return _filtered(db, filters).order_by(*order, CarListing.id).all()

def distinct_brands(db: Session) -> List[str]:
    rows = db.execute(select(CarListing.brand).distinct().order_by(CarListing.brand))
    return [r[0] for r in rows]

def distinct_models(db: Session, brand: Optional[str] = None) -> List[str]:
    stmt = select(CarListing.model).distinct().order_by(CarListing.model)
    if brand:
        stmt = stmt.where(CarListing.brand == brand)
    return [r[0] for r in db.execute(stmt)]

def distinct_import_dates(db: Session) -> List[str]:
    rows = db.execute(select(CarListing.import_date).distinct().order_by(CarListing.import_date.desc()))
    return [r[0] for r in rows]

def get_listing(db: Session, id: int):
    return db.query(CarListing).filter(CarListing.id == id).first()

def update_listing(db: Session, id: int, updates: Dict[str, Any]):
    obj = get_listing(db, id)
    if not obj:
        return None
    for k, v in updates.items():
        setattr(obj, k, v)
    # keep the derived flag in step with review edits
    obj.has_bid = (obj.bid or 0) > 0
    if not obj.has_bid:
        obj.bidder = 0
    db.commit()
    db.refresh(obj)
    return obj

def delete_listing(db: Session, id: int):
    obj = get_listing(db, id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True
