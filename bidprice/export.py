# bidprice/export.py
"""Master-file export.

Listings are split into two sheets: "BId" for listings that received a bid
and "No Bid" for the rest. The "No Bid" sheet carries extra blank columns
that are filled in by hand during review.
"""
from datetime import date
from io import BytesIO
from typing import Any, Callable, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from .errors import ExportError
from .settings import PLATFORM_NAME

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
FILENAME_TEMPLATE = "Carsome_Bid_Price_Master_{day}.xlsx"


class SheetSchema(NamedTuple):
    title: str
    # (header label, column width in characters)
    columns: Tuple[Tuple[str, int], ...]
    row: Callable[[Any], List[Any]]


def _get(listing: Any, name: str) -> Any:
    if isinstance(listing, Mapping):
        return listing.get(name)
    return getattr(listing, name, None)


def _listing_fields(listing: Any) -> List[Any]:
    return [
        _get(listing, "listing_id"),
        _get(listing, "brand"),
        _get(listing, "model"),
        _get(listing, "variant"),
        _get(listing, "year"),
        _get(listing, "price"),
        _get(listing, "mileage"),
        _get(listing, "location"),
        _get(listing, "bid"),
        _get(listing, "bidder"),
    ]


def _bid_row(listing: Any) -> List[Any]:
    return [_get(listing, "import_date"), _get(listing, "import_time")] + _listing_fields(listing)


def _no_bid_row(listing: Any) -> List[Any]:
    return (
        [_get(listing, "import_date"), _get(listing, "import_time"), PLATFORM_NAME]
        + _listing_fields(listing)
        + ["", "", ""]
    )


BID_SHEET = SheetSchema(
    title="BId",
    columns=(
        ("Import Date", 12),
        ("Time", 8),
        ("Listing ID", 10),
        ("Brand", 16),
        ("Model", 30),
        ("Variant", 12),
        ("Year", 6),
        ("Price (RM)", 12),
        ("Mileage (KM)", 12),
        ("Location", 18),
        ("Bid", 6),
        ("Bidder", 8),
    ),
    row=_bid_row,
)

NO_BID_SHEET = SheetSchema(
    title="No Bid",
    columns=(
        ("Date", 12),
        ("Time", 8),
        ("Platform", 10),
        ("Listing ID", 10),
        ("Brand", 16),
        ("Model", 30),
        ("Variant", 12),
        ("Year", 6),
        ("Price (RM)", 12),
        ("Mileage (KM)", 12),
        ("Location", 18),
        ("Bid", 6),
        ("Bidder", 8),
        ("", 2),
        ("Seller Type", 12),
        ("Notes", 20),
    ),
    row=_no_bid_row,
)


def partition(listings: Iterable[Any]) -> Tuple[List[Any], List[Any]]:
    """Split listings into (with bid, without bid), keeping input order."""
    with_bid, without_bid = [], []
    for listing in listings:
        has_bid = bool(_get(listing, "has_bid"))
        if has_bid != ((_get(listing, "bid") or 0) > 0):
            raise ExportError(f"listing {_get(listing, 'listing_id')} has a bid flag inconsistent with its bid")
        (with_bid if has_bid else without_bid).append(listing)
    return with_bid, without_bid


def _write_sheet(ws, schema: SheetSchema, listings: Sequence[Any]):
    ws.title = schema.title
    ws.append([header for header, _ in schema.columns])
    for listing in listings:
        ws.append(schema.row(listing))
        for cell in ws[ws.max_row]:
            # sheet text such as "=1+1" stays text, not a formula
            if isinstance(cell.value, str):
                cell.data_type = "s"
    for idx, (_, width) in enumerate(schema.columns, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def export_to_master_format(listings: Iterable[Any]) -> bytes:
    """Render listings into the two-sheet master workbook and return its bytes.

    Listings are written in the order given; callers sort before exporting.
    """
    with_bid, without_bid = partition(listings)
    try:
        workbook = Workbook()
        _write_sheet(workbook.active, BID_SHEET, with_bid)
        _write_sheet(workbook.create_sheet(), NO_BID_SHEET, without_bid)
        buffer = BytesIO()
        workbook.save(buffer)
    except Exception as e:
        raise ExportError(f"Could not write master workbook: {e}") from e
    return buffer.getvalue()


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return FILENAME_TEMPLATE.format(day=day.isoformat())
