# tests/conftest.py
from io import BytesIO

import pytest
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bidprice.db import Base
import bidprice.models  # noqa: F401


def block(listing_id, description, mileage="50,000 km", location="Selangor", price="30000", bid="-", bidder="-"):
    """Column-A cells of one pasted auction listing, marker first."""
    return ["Ended", listing_id, description, mileage, location, price, "Click to Max Bid", bid, bidder]


def build_workbook(sheets):
    """Serialize ``[(title, rows), ...]`` to xlsx bytes; rows are lists of cell values."""
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets:
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def column_a(*cells, header=None):
    """Rows with one value each in column A, preceded by an optional header row."""
    rows = [header] if header is not None else []
    rows.extend([cell] for cell in cells)
    return rows


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
