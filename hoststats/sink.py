"""
Append-only tabular sinks for hoststats output.

A sink writes the header row once with initialize() and then receives one
batch of rows per endpoint through append(). Two formats are provided:
- CSV: comma-delimited text (default)
- XLSX: Excel workbook with a single sheet

Usage:
    from hoststats.sink import create_sink

    sink = create_sink("hoststats.csv")
    sink.initialize(headers())
    sink.append(rows)
"""

import csv
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from openpyxl import Workbook, load_workbook

from hoststats.errors import ErrorCode, SinkWriteError


class TabularSink(ABC):
    """Abstract base class for append-only tabular destinations."""

    def __init__(self, path: str):
        self.path = path

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the format name."""
        pass

    @property
    @abstractmethod
    def extension(self) -> str:
        """Return the file extension for this format."""
        pass

    @abstractmethod
    def initialize(self, headers: Sequence[str]) -> None:
        """Create or truncate the destination and write the header row.

        Raises:
            SinkWriteError: If the destination cannot be written.
        """
        pass

    @abstractmethod
    def append(self, rows: Sequence[Sequence[str]]) -> None:
        """Append rows after the rows already written.

        Raises:
            SinkWriteError: If the destination cannot be written. Rows appended
                by earlier calls are kept.
        """
        pass


class SinkRegistry:
    """Registry of sink classes by file extension."""

    _sinks: Dict[str, type] = {}

    @classmethod
    def register(cls, sink_class: type) -> type:
        """
        Register a sink class.

        Can be used as a decorator:
            @SinkRegistry.register
            class MySink(TabularSink):
                ...
        """
        instance = sink_class("")
        cls._sinks[instance.extension] = sink_class
        return sink_class

    @classmethod
    def get(cls, extension: str) -> Optional[type]:
        """Get a sink class by file extension."""
        return cls._sinks.get(extension.lower().lstrip('.'))

    @classmethod
    def available_formats(cls) -> List[str]:
        """Get the list of supported file extensions."""
        return list(cls._sinks.keys())


@SinkRegistry.register
class CSVSink(TabularSink):
    """Comma-delimited text sink."""

    @property
    def name(self) -> str:
        return "csv"

    @property
    def extension(self) -> str:
        return "csv"

    def _write(self, mode: str, rows: Sequence[Sequence[str]], operation: str) -> None:
        try:
            with open(self.path, mode, newline='') as f:
                writer = csv.writer(f, lineterminator='\n')
                writer.writerows(rows)
                f.flush()
        except OSError as e:
            code = ErrorCode.SINK_NOT_WRITABLE if mode == 'w' else ErrorCode.SINK_WRITE_FAILED
            raise SinkWriteError(
                f"Could not write to {self.path}: {e.strerror or e}",
                path=self.path,
                operation=operation,
                code=code
            ) from e

    def initialize(self, headers: Sequence[str]) -> None:
        self._write('w', [list(headers)], 'initialize')

    def append(self, rows: Sequence[Sequence[str]]) -> None:
        self._write('a', rows, 'append')


@SinkRegistry.register
class XLSXSink(TabularSink):
    """Excel workbook sink; rows go to a single 'HostStats' sheet."""

    SHEET_TITLE = "HostStats"

    @property
    def name(self) -> str:
        return "excel"

    @property
    def extension(self) -> str:
        return "xlsx"

    def initialize(self, headers: Sequence[str]) -> None:
        wb = Workbook()
        ws = wb.active
        ws.title = self.SHEET_TITLE
        ws.append(list(headers))
        self._save(wb, 'initialize', ErrorCode.SINK_NOT_WRITABLE)

    def append(self, rows: Sequence[Sequence[str]]) -> None:
        try:
            wb = load_workbook(self.path)
        except Exception as e:
            raise SinkWriteError(
                f"Could not open workbook {self.path}: {e}",
                path=self.path,
                operation='append',
                code=ErrorCode.SINK_WRITE_FAILED
            ) from e
        if self.SHEET_TITLE not in wb.sheetnames:
            raise SinkWriteError(
                f"Workbook {self.path} has no '{self.SHEET_TITLE}' sheet",
                path=self.path,
                operation='append',
                code=ErrorCode.SINK_WRITE_FAILED
            )
        ws = wb[self.SHEET_TITLE]
        for row in rows:
            ws.append([_cell_value(value) for value in row])
        self._save(wb, 'append', ErrorCode.SINK_WRITE_FAILED)

    def _save(self, wb, operation: str, code: ErrorCode) -> None:
        try:
            wb.save(self.path)
        except OSError as e:
            raise SinkWriteError(
                f"Could not write to {self.path}: {e.strerror or e}",
                path=self.path,
                operation=operation,
                code=code
            ) from e


def _cell_value(value):
    # Whole numbers become numeric cells; everything else stays text.
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return value


def create_sink(path: str) -> TabularSink:
    """Create the sink matching the extension of path (CSV when there is none).

    Raises:
        SinkWriteError: If the extension is not supported.
    """
    extension = os.path.splitext(path)[1].lstrip('.').lower() or 'csv'
    sink_class = SinkRegistry.get(extension)
    if sink_class is None:
        raise SinkWriteError(
            f"Unsupported output format: .{extension}",
            path=path,
            operation='create',
            suggestion=f"Use one of: {', '.join(SinkRegistry.available_formats())}",
            code=ErrorCode.SINK_UNSUPPORTED_FORMAT
        )
    return sink_class(path)
