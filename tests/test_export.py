"""
Tests for the master-file export.
"""
from datetime import date
from io import BytesIO

import pytest
from openpyxl import load_workbook

from bidprice.errors import ExportError
from bidprice.export import (
    BID_SHEET,
    NO_BID_SHEET,
    export_filename,
    export_to_master_format,
    partition,
)
from bidprice.schemas import ListingRecord


def make_record(listing_id, bid=0, bidder=0, **overrides):
    data = dict(
        import_date="2025-01-15",
        import_time="13:00",
        listing_id=listing_id,
        brand="Toyota",
        model="Vios",
        variant="1.5 J Auto",
        year=2015,
        price=45000,
        mileage=120000,
        location="Kuala Lumpur",
        bid=bid,
        bidder=bidder,
    )
    data.update(overrides)
    return ListingRecord(**data)


def read_rows(ws):
    return [["" if v is None else v for v in row] for row in ws.iter_rows(values_only=True)]


@pytest.fixture
def listings():
    return [
        make_record("1", bid=46000, bidder=1002),
        make_record("2"),
        make_record("3", bid=30000, bidder=77, brand="Honda", model="City"),
        make_record("4", brand="Proton"),
        make_record("5"),
    ]


class TestPartition:

    def test_perfect_split_in_input_order(self, listings):
        with_bid, without_bid = partition(listings)

        assert [l.listing_id for l in with_bid] == ["1", "3"]
        assert [l.listing_id for l in without_bid] == ["2", "4", "5"]
        assert len(with_bid) + len(without_bid) == len(listings)

    def test_accepts_mappings(self):
        rows = [{"listing_id": "9", "bid": 10, "has_bid": True}, {"listing_id": "8", "bid": 0, "has_bid": False}]

        with_bid, without_bid = partition(rows)

        assert with_bid == [rows[0]]
        assert without_bid == [rows[1]]

    def test_rejects_inconsistent_flag(self):
        with pytest.raises(ExportError):
            partition([{"listing_id": "9", "bid": 0, "has_bid": True}])


class TestExportWorkbook:

    def test_sheets_and_headers(self, listings):
        wb = load_workbook(BytesIO(export_to_master_format(listings)))

        assert wb.sheetnames == ["BId", "No Bid"]
        assert read_rows(wb["BId"])[0] == [
            "Import Date", "Time", "Listing ID", "Brand", "Model", "Variant", "Year",
            "Price (RM)", "Mileage (KM)", "Location", "Bid", "Bidder",
        ]
        assert read_rows(wb["No Bid"])[0] == [
            "Date", "Time", "Platform", "Listing ID", "Brand", "Model", "Variant", "Year",
            "Price (RM)", "Mileage (KM)", "Location", "Bid", "Bidder", "", "Seller Type", "Notes",
        ]

    def test_column_widths(self, listings):
        wb = load_workbook(BytesIO(export_to_master_format(listings)))

        bid_widths = [wb["BId"].column_dimensions[c].width for c in "ABCDEFGHIJKL"]
        no_bid_widths = [wb["No Bid"].column_dimensions[c].width for c in "ABCDEFGHIJKLMNOP"]

        assert bid_widths == [w for _, w in BID_SHEET.columns]
        assert no_bid_widths == [w for _, w in NO_BID_SHEET.columns]
        assert no_bid_widths[13] == 2

    def test_rows(self, listings):
        wb = load_workbook(BytesIO(export_to_master_format(listings)))

        bid_rows = read_rows(wb["BId"])[1:]
        no_bid_rows = read_rows(wb["No Bid"])[1:]

        assert len(bid_rows) + len(no_bid_rows) == len(listings)
        assert bid_rows[0] == [
            "2025-01-15", "13:00", "1", "Toyota", "Vios", "1.5 J Auto", 2015,
            45000, 120000, "Kuala Lumpur", 46000, 1002,
        ]
        assert [r[3] for r in no_bid_rows] == ["2", "4", "5"]
        assert no_bid_rows[1][:5] == ["2025-01-15", "13:00", "Carsome", "4", "Proton"]
        assert no_bid_rows[1][11:] == [0, 0, "", "", ""]

    def test_text_starting_with_equals_is_not_a_formula(self):
        records = [
            make_record("1", bid=20000, bidder=3, location="=HYPERLINK(\"x\")"),
            make_record("2", model="=1+1"),
        ]

        wb = load_workbook(BytesIO(export_to_master_format(records)))

        model_cell = wb["No Bid"]["F2"]
        assert model_cell.data_type == "s"
        assert model_cell.value == "=1+1"
        location_cell = wb["BId"]["J2"]
        assert location_cell.data_type == "s"
        assert location_cell.value == "=HYPERLINK(\"x\")"

    def test_empty_input_still_has_both_sheets(self):
        wb = load_workbook(BytesIO(export_to_master_format([])))

        assert wb.sheetnames == ["BId", "No Bid"]
        assert len(read_rows(wb["BId"])) == 1
        assert len(read_rows(wb["No Bid"])) == 1


def test_export_filename():
    assert export_filename(date(2025, 2, 1)) == "Carsome_Bid_Price_Master_2025-02-01.xlsx"
