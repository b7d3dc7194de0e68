# tests/test_run_and_save.py
import pytest
from openpyxl import load_workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import bidprice.db
import bidprice.services
import run_and_save
from bidprice import crud
from bidprice.errors import ExportError
from conftest import block, build_workbook, column_a


@pytest.fixture
def cli_db(monkeypatch):
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(bidprice.db, "engine", engine)
    monkeypatch.setattr(bidprice.db, "SessionLocal", factory)
    yield factory
    engine.dispose()


def test_parser():
    args = run_and_save.build_parser().parse_args(["export", "--brand", "Honda", "--min-year", "2015"])
    assert args.command == "export"
    assert args.brand == "Honda"
    assert args.min_year == 2015


def test_import_and_export(cli_db, tmp_path, capsys):
    header = ["Auction", None, None, None, None, None, "2025-01-15", "1pm"]
    cells = block("11", "2016 Mazda 2 1.5 Auto") + block("12", "2017 Mazda 3 2.0 Auto", bid="60000", bidder="3")
    path = tmp_path / "auction.xlsx"
    path.write_bytes(build_workbook([("Sheet1", [header] + column_a(*cells))]))

    assert run_and_save.run_import([str(path), str(tmp_path / "missing.xlsx")]) == 1
    out = capsys.readouterr().out
    assert "auction.xlsx: Imported 2 new items." in out

    session = cli_db()
    assert crud.count_listings(session) == 2
    session.close()

    assert run_and_save.run_export(tmp_path, {"brand": "Mazda"}) == 0
    [exported] = list(tmp_path.glob("Carsome_Bid_Price_Master_*.xlsx"))
    assert load_workbook(exported).sheetnames == ["BId", "No Bid"]

    assert run_and_save.run_export(tmp_path, {"brand": "Ferrari"}) == 1


def test_export_error_is_reported(cli_db, tmp_path, monkeypatch, capsys):
    def broken_export(db, filters=None):
        raise ExportError("Could not write master workbook: disk full")

    monkeypatch.setattr(bidprice.services, "export_listings", broken_export)

    assert run_and_save.run_export(tmp_path, {}) == 1
    assert "disk full" in capsys.readouterr().out
    assert list(tmp_path.iterdir()) == []


def test_postgres_scheme_is_normalized_by_db_module():
    url = bidprice.db._normalize_url("postgres://bids:secret@db:5432/bids")

    assert url == "postgresql+psycopg2://bids:secret@db:5432/bids"
    assert bidprice.db._normalize_url("sqlite:///./bid_prices.db") == "sqlite:///./bid_prices.db"
