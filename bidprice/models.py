# bidprice/models.py
"""SQLAlchemy ORM models for persisted entities.

``CarListing`` holds one imported auction listing; ``ImportLog`` remembers
which files have been imported when whole-file de-duplication is in force.
"""
from sqlalchemy import Column, Integer, Text, Numeric, Boolean, TIMESTAMP, func, Index
from .db import Base

class CarListing(Base):
    __tablename__ = "car_listings"
    id = Column(Integer, primary_key=True, index=True)
    import_date = Column(Text, nullable=False)
    import_time = Column(Text, nullable=False)
    # not unique: the file-hash policy may store one listing from two files
    listing_id = Column(Text, nullable=False, index=True)
    brand = Column(Text, nullable=False, default="")
    model = Column(Text, nullable=False, default="")
    variant = Column(Text, nullable=False, default="")
    year = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(asdecimal=False), nullable=False, default=0)
    mileage = Column(Integer, nullable=False, default=0)
    location = Column(Text, nullable=False, default="")
    bid = Column(Numeric(asdecimal=False), nullable=False, default=0)
    bidder = Column(Integer, nullable=False, default=0)
    has_bid = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class ImportLog(Base):
    __tablename__ = "import_logs"
    id = Column(Integer, primary_key=True, index=True)
    file_hash = Column(Text, nullable=False, unique=True, index=True)
    file_name = Column(Text)
    item_count = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

Index("idx_car_listings_brand_model", CarListing.brand, CarListing.model)
Index("idx_car_listings_year", CarListing.year)
Index("idx_car_listings_price", CarListing.price)
Index("idx_car_listings_import_date", CarListing.import_date)
