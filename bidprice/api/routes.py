# bidprice/api/routes.py
from io import BytesIO
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from .. import crud, schemas, services
from ..db import get_db
from ..errors import ExportError, ImportFileError, NothingToExport
from ..export import XLSX_MIME
from ..settings import PAGE_SIZE
from ..utils import logger

router = APIRouter()

def listing_filters(
    brand: str | None = Query(None),
    model: str | None = Query(None),
    import_date: str | None = Query(None),
    min_year: int | None = Query(None),
    max_year: int | None = Query(None),
    min_price: float | None = Query(None),
    max_price: float | None = Query(None),
    has_bid: bool | None = Query(None),
):
    return schemas.ListingFilter(
        brand=brand,
        model=model,
        import_date=import_date,
        min_year=min_year,
        max_year=max_year,
        min_price=min_price,
        max_price=max_price,
        has_bid=has_bid,
    ).model_dump()

@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/listings", response_model=schemas.ListingPage)
def listings(
    skip: int = Query(0, ge=0),
    limit: int = Query(PAGE_SIZE, ge=1, le=1000),
    filters: dict = Depends(listing_filters),
    db: Session = Depends(get_db)
):
    return crud.list_listings(db, skip=skip, limit=limit, filters=filters)


@router.get("/listings/options", response_model=schemas.FilterOptions)
def listing_options(brand: str | None = Query(None), db: Session = Depends(get_db)):
    return schemas.FilterOptions(
        brands=crud.distinct_brands(db),
        models=crud.distinct_models(db, brand=brand),
        import_dates=crud.distinct_import_dates(db),
    )


@router.get("/listings/{id}", response_model=schemas.ListingOut)
def get_listing(id: int, db: Session = Depends(get_db)):
    obj = crud.get_listing(db, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Listing not found")
    return obj


@router.patch("/listings/{id}", response_model=schemas.ListingOut)
def update_listing(id: int, payload: schemas.ListingUpdate, db: Session = Depends(get_db)):
    obj = crud.update_listing(db, id, updates=payload.model_dump(exclude_unset=True))
    if not obj:
        raise HTTPException(status_code=404, detail="Listing not found")
    return obj


@router.delete("/listings/{id}")
def delete_listing(id: int, db: Session = Depends(get_db)):
    ok = crud.delete_listing(db, id)
    if not ok:
        raise HTTPException(status_code=404, detail="Listing not found")
    return {"status": "deleted"}

@router.post("/import", response_model=schemas.ImportResult)
def import_file(file: UploadFile = File(...), db: Session = Depends(get_db)):
    data = file.file.read()
    try:
        return services.import_file(db, data, filename=file.filename)
    except ImportFileError as e:
        logger.warning("Rejected upload %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/export")
def export_master(filters: dict = Depends(listing_filters), db: Session = Depends(get_db)):
    try:
        filename, data, count = services.export_listings(db, filters=filters)
    except NothingToExport as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ExportError as e:
        logger.exception("Export failed: %s", e)
        raise HTTPException(status_code=500, detail="Export failed")
    headers = {
        "Content-Disposition": f"attachment; filename={filename}",
        "X-Item-Count": str(count),
    }
    return StreamingResponse(BytesIO(data), media_type=XLSX_MIME, headers=headers)
