# bidprice/importer.py
"""Turn an uploaded auction workbook into ``ListingRecord`` objects.

The workbook is a copy-paste of the auction results page, not a table: see
``blocks`` for the per-listing layout. The import date and time are taken
once per file from cells G1 and H1 and shared by every record.
"""
import re
from datetime import date, datetime, time
from io import BytesIO
from typing import Any, List, Optional

import openpyxl
import xlrd
from openpyxl.utils.datetime import from_excel
from pydantic import ValidationError

from .blocks import SheetGrid, extract_blocks, find_markers
from .errors import ImportFileError
from .schemas import ListingRecord
from .utils import logger

OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_MAGIC = b"PK\x03\x04"
PASTE_SHEET_HINT = "paste sample"
MARKER_SCAN_ROWS = 21
DATE_CELL = (0, 6)  # G1
TIME_CELL = (0, 7)  # H1

AMPM_RE = re.compile(r"^(\d{1,2})\s*(am|pm)$", re.IGNORECASE)

# day-first before month-first: sheets come from a Malaysian platform
DATE_FORMATS = (
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%a %b %d %Y",
)


def _is_xls(data: bytes, filename: Optional[str]) -> bool:
    if data[:8] == OLE2_MAGIC:
        return True
    if data[:4] == ZIP_MAGIC:
        return False
    # content is not recognisable, go by the extension
    return bool(filename) and filename.lower().endswith(".xls")


def _read_xlsx(data: bytes) -> List[SheetGrid]:
    wb = openpyxl.load_workbook(BytesIO(data), data_only=True)
    try:
        return [
            SheetGrid(ws.title, [list(row) for row in ws.iter_rows(values_only=True)])
            for ws in wb.worksheets
        ]
    finally:
        wb.close()


def _read_xls(data: bytes) -> List[SheetGrid]:
    book = xlrd.open_workbook(file_contents=data)
    grids = []
    for sheet in book.sheets():
        rows = []
        for r in range(sheet.nrows):
            values = []
            for cell in sheet.row(r):
                if cell.ctype == xlrd.XL_CELL_DATE:
                    values.append(xlrd.xldate.xldate_as_datetime(cell.value, book.datemode))
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    values.append(None)
                else:
                    values.append(cell.value)
            rows.append(values)
        grids.append(SheetGrid(sheet.name, rows))
    return grids


def load_sheets(data: bytes, filename: Optional[str] = None) -> List[SheetGrid]:
    """Read every worksheet of an ``.xlsx`` or ``.xls`` buffer into grids."""
    reader = _read_xls if _is_xls(data, filename) else _read_xlsx
    try:
        return reader(data)
    except Exception as e:
        raise ImportFileError(f"Could not read workbook: {e}") from e


def select_sheet(sheets: List[SheetGrid]) -> SheetGrid:
    """Pick the worksheet holding the pasted auction results.

    A "Paste Sample" sheet with more than a handful of rows is preferred,
    unless the first sheet already shows an ``Ended`` marker near the top.
    """
    first = sheets[0]
    if find_markers(first, limit=MARKER_SCAN_ROWS):
        return first
    for sheet in sheets:
        if PASTE_SHEET_HINT in sheet.name.lower() and sheet.last_row > 5:
            return sheet
    return first


def parse_date_text(text: str) -> Optional[date]:
    text = text.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def infer_import_date(value: Any, now: datetime) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            decoded = from_excel(value)
        except (ValueError, OverflowError):
            decoded = None
        if isinstance(decoded, datetime):
            return decoded.date().isoformat()
    elif isinstance(value, str):
        parsed = parse_date_text(value)
        if parsed:
            return parsed.isoformat()
    return now.date().isoformat()


def infer_import_time(value: Any, now: datetime) -> str:
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    if value is not None:
        text = str(value).strip()
        m = AMPM_RE.match(text)
        if m:
            hour = int(m.group(1))
            suffix = m.group(2).lower()
            if suffix == "pm" and hour < 12:
                hour += 12
            if suffix == "am" and hour == 12:
                hour = 0
            return f"{hour:02d}:00"
        if ":" in text:
            return text
    return now.strftime("%H:%M")


def parse_sheet(sheet: SheetGrid, now: Optional[datetime] = None) -> List[ListingRecord]:
    now = now or datetime.now()
    import_date = infer_import_date(sheet.cell(*DATE_CELL), now)
    import_time = infer_import_time(sheet.cell(*TIME_CELL), now)

    listings = []
    for row, fields in extract_blocks(sheet):
        desc = fields["description"]
        try:
            record = ListingRecord(
                import_date=import_date,
                import_time=import_time,
                listing_id=fields["listing_id"],
                brand=desc.brand,
                model=desc.model,
                variant=desc.variant,
                year=desc.year,
                price=fields["price"],
                mileage=fields["mileage"],
                location=fields["location"],
                bid=fields["bid"],
                bidder=fields["bidder"],
            )
        except ValidationError as e:
            logger.warning("Skipping block at row %d of %r: %s", row + 1, sheet.name, e)
            continue
        listings.append(record)
    return listings


def parse_import_file(data: bytes, filename: Optional[str] = None, now: Optional[datetime] = None) -> List[ListingRecord]:
    """Parse one uploaded workbook.

    Returns an empty list when the chosen sheet has no ``Ended`` markers.
    Raises ``ImportFileError`` when the buffer is not a readable workbook.
    """
    sheets = load_sheets(data, filename)
    if not sheets:
        return []
    sheet = select_sheet(sheets)
    listings = parse_sheet(sheet, now=now)
    logger.info("Parsed %d listings from sheet %r of %s", len(listings), sheet.name, filename or "upload")
    return listings
