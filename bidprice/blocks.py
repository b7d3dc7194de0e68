# bidprice/blocks.py
"""Record-block extraction from a raw sheet grid.

An auction sheet pasted from the Carsome bidding page has no header row.
Each listing starts with a cell reading ``Ended`` in column A and its fields
follow on the next rows of the same column at fixed offsets. The offsets are
described by ``BLOCK_SCHEMA`` rather than hard-coded in the extractor.
"""
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .normalize import (
    parse_amount,
    parse_listing_id,
    parse_location,
    parse_mileage,
    parse_year_brand_model_variant,
)
from .utils import logger

BLOCK_MARKER = "Ended"


class SheetGrid(NamedTuple):
    """Cell values of one worksheet, row-major and zero-indexed."""
    name: str
    rows: List[Sequence[Any]]

    @property
    def last_row(self) -> int:
        return len(self.rows) - 1

    def cell(self, row: int, col: int) -> Any:
        if row < 0 or row >= len(self.rows):
            return None
        values = self.rows[row]
        if col < 0 or col >= len(values):
            return None
        return values[col]


class BlockField(NamedTuple):
    offset: int
    name: str
    parser: Callable[[Any], Any]
    required: bool = False


def parse_bidder(raw: Any) -> int:
    return int(parse_amount(raw))


BLOCK_SCHEMA: Tuple[BlockField, ...] = (
    BlockField(1, "listing_id", parse_listing_id, required=True),
    BlockField(2, "description", parse_year_brand_model_variant, required=True),
    BlockField(3, "mileage", parse_mileage),
    BlockField(4, "location", parse_location),
    BlockField(5, "price", parse_amount),
    # offset 6 holds the "Click to Max Bid" button label
    BlockField(7, "bid", parse_amount),
    BlockField(8, "bidder", parse_bidder),
)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_marker(value: Any) -> bool:
    return value is not None and str(value).strip() == BLOCK_MARKER


def find_markers(grid: SheetGrid, limit: Optional[int] = None) -> List[int]:
    """Row indexes whose column A reads ``Ended``, optionally only the first ``limit`` rows."""
    last = grid.last_row if limit is None else min(grid.last_row, limit - 1)
    return [r for r in range(last + 1) if is_marker(grid.cell(r, 0))]


def read_block(grid: SheetGrid, row: int, schema: Sequence[BlockField] = BLOCK_SCHEMA):
    """Parse the block whose marker sits at ``row``.

    Returns ``None`` when a required cell is missing.
    """
    fields: Dict[str, Any] = {}
    for field in schema:
        raw = grid.cell(row + field.offset, 0)
        if is_blank(raw):
            if field.required:
                return None
            raw = None
        fields[field.name] = field.parser(raw)
    return fields


def extract_blocks(grid: SheetGrid, schema: Sequence[BlockField] = BLOCK_SCHEMA) -> Iterator[Tuple[int, Dict[str, Any]]]:
    """Yield ``(marker_row, fields)`` for every readable block in the grid."""
    for row in find_markers(grid):
        try:
            fields = read_block(grid, row, schema)
        except Exception as e:
            logger.warning("Skipping block at row %d of %r: %s", row + 1, grid.name, e)
            continue
        if fields is None:
            logger.warning("Skipping block at row %d of %r: listing id or description missing", row + 1, grid.name)
            continue
        yield row, fields
