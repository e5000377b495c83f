from __future__ import annotations


class HistoryError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class InvalidSpecError(HistoryError):
    """Filter or sort options reference a value outside their domain."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "invalid_spec")


class InvalidRecordError(HistoryError):
    """A record (or a collection of records) breaks the record contract."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "invalid_record")


class UnsupportedExportFormatError(HistoryError):
    def __init__(self, fmt: str) -> None:
        super().__init__(f"Unsupported export format: {fmt!r}", "unsupported_format")
        self.format = fmt
