"""Custom exceptions for the exam schedule parser."""


class ParseError(Exception):
    """Base exception for parser errors."""

    pass


class MalformedInputError(ParseError):
    """Spreadsheet container could not be read."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed spreadsheet: {reason}")


class UnrecognizedLayoutError(ParseError):
    """Worksheet matched no known layout and no header mapping was supplied."""

    def __init__(self, message: str | None = None, headers: list[str] | None = None):
        self.headers = headers or []
        if message is None:
            message = (
                "Worksheet has neither a block nor a section structure. "
                "Supply a header mapping to read it as a table."
            )
        if self.headers:
            message += f" Available headers: {', '.join(self.headers)}"
        super().__init__(message)


class HeaderMappingError(UnrecognizedLayoutError):
    """Required fields could not be mapped to header cells."""

    def __init__(self, missing_fields: list[str], headers: list[str] | None = None):
        self.missing_fields = missing_fields
        super().__init__(
            f"Missing required field mappings: {', '.join(missing_fields)}.",
            headers=headers,
        )


class OutOfRangeError(ParseError):
    """Hijri year outside the supported conversion band."""

    def __init__(self, year: int, min_year: int, max_year: int):
        self.year = year
        self.min_year = min_year
        self.max_year = max_year
        super().__init__(
            f"Hijri year {year} outside supported range [{min_year}, {max_year})"
        )


class RecordRejectedError(ParseError):
    """A single row failed shape validation."""

    def __init__(self, message: str, row: int | None = None, field: str | None = None):
        self.row = row
        self.field = field
        self.message = message
        location = ""
        if row is not None:
            location += f" at row {row}"
        if field:
            location += f" ({field})"
        super().__init__(f"Record rejected{location}: {message}")
