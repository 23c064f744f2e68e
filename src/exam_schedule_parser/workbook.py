"""Worksheet loading.

Only the first worksheet of a workbook is read. Cell values are materialized
into a pandas grid and the openpyxl workbook is closed before the worksheet is
returned, so nothing stays open while records are consumed.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Self
from zipfile import BadZipFile

import openpyxl
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .exceptions import MalformedInputError
from .models import RawCell
from .utils import cell_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Worksheet:
    """Read-only grid of cell values and their display text.

    Rows and columns are 0-based positions.

    Attributes:
        name: Sheet name
        values: Underlying cell values
        texts: Display text per cell (empty string for empty cells)
    """

    name: str
    values: pd.DataFrame
    texts: pd.DataFrame

    @classmethod
    def from_rows(cls, rows: list[list], name: str = "Sheet1") -> Self:
        """Build a worksheet from row lists of cell values.

        Args:
            rows: Row lists; shorter rows are padded with empty cells
            name: Sheet name

        Returns:
            Worksheet instance
        """
        width = max((len(row) for row in rows), default=0)
        padded = [list(row) + [None] * (width - len(row)) for row in rows]
        values = pd.DataFrame(padded, dtype=object)
        texts = pd.DataFrame([[cell_text(v) for v in row] for row in padded], dtype=object)
        return cls(name=name, values=values, texts=texts)

    @property
    def n_rows(self) -> int:
        return len(self.texts.index)

    @property
    def n_columns(self) -> int:
        return len(self.texts.columns)

    def cell(self, row: int, column: int) -> RawCell:
        """Get a cell; positions outside the grid read as empty."""
        if 0 <= row < self.n_rows and 0 <= column < self.n_columns:
            return RawCell(
                row=row,
                column=column,
                value=self.values.iat[row, column],
                text=self.texts.iat[row, column],
            )
        return RawCell(row=row, column=column, value=None, text="")

    def text(self, row: int, column: int | None) -> str:
        """Display text of a cell ("" when out of range or column is None)."""
        if column is None:
            return ""
        return self.cell(row, column).text

    def row_values(self, row: int) -> list:
        return self.values.iloc[row].tolist()

    def row_texts(self, row: int) -> list[str]:
        return self.texts.iloc[row].tolist()

    def is_empty_row(self, row: int) -> bool:
        return not any(self.row_texts(row))


def load_worksheet(data: bytes, max_rows: int | None = None) -> Worksheet:
    """Read the first worksheet of an .xlsx file.

    Formula cells yield their cached results; formulas are not evaluated.

    Args:
        data: Raw spreadsheet bytes
        max_rows: Stop after this many rows (None reads the whole sheet)

    Returns:
        Worksheet with the sheet's values

    Raises:
        MalformedInputError: If the container cannot be read or has no worksheet
    """
    try:
        workbook = openpyxl.load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as e:
        raise MalformedInputError(str(e) or e.__class__.__name__) from e

    try:
        if not workbook.worksheets:
            raise MalformedInputError("Excel file must contain at least one worksheet")

        sheet = workbook.worksheets[0]
        # Some exporters write a wrong dimension record
        sheet.reset_dimensions()
        rows = [list(row) for row in sheet.iter_rows(max_row=max_rows, values_only=True)]
        name = sheet.title
    finally:
        workbook.close()

    # Trailing empty rows carry no content
    while rows and all(value is None for value in rows[-1]):
        rows.pop()

    logger.debug(f"Loaded worksheet '{name}' with {len(rows)} rows")
    return Worksheet.from_rows(rows, name=name)
