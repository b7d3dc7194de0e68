# bidprice/errors.py
"""Exceptions raised by the import/export core and the store helpers."""


class BidPriceError(Exception):
    """Base class for all application errors."""


class ImportFileError(BidPriceError):
    """The uploaded buffer could not be opened as a workbook."""


class ExportError(BidPriceError):
    """Writing the master workbook failed; no file is produced."""


class NothingToExport(BidPriceError):
    """No stored listing matched the export filters."""


class BatchInsertError(BidPriceError):
    """An insert chunk was rejected by the database.

    Chunks before ``batch_index`` are already committed; ``inserted`` counts
    the rows they contained.
    """

    def __init__(self, batch_index: int, inserted: int, message: str):
        super().__init__(f"batch {batch_index}: {message}")
        self.batch_index = batch_index
        self.inserted = inserted
        self.message = message
