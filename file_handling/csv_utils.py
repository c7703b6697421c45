"""
CSV utilities for Basic File Browser.

This module provides the two streaming passes the browser runs over CSV
files: profiling (header names, per-column category/numeric inference and
row count) and column extraction. Both read the file in chunks through the
pandas tokenizer, treat every value as a raw string, and either return a
complete result or raise; no partial result is ever returned.
"""

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from core.exceptions import (
    AccessDeniedError,
    FileReadError,
    NotFoundError,
    ParseError,
    ReadTimeoutError,
)
from .models import ColumnProfile, CsvProfile

# A column is a category column iff it has at most this many distinct values.
CATEGORY_MAX_DISTINCT = 5

DEFAULT_CHUNK_SIZE = 10000
DEFAULT_READ_TIMEOUT = 30.0

_HEADER_QUOTES = re.compile(r'^"?(.+?)"?$')
_LINE_NUMBER = re.compile(r'line (\d+)')


def parse_header_line(line: str) -> List[str]:
    """
    Split a CSV header line into column names.

    Each comma-separated token loses at most one pair of surrounding double
    quotes. Quoted headers containing commas or escaped quotes are not
    supported.
    """
    return [_HEADER_QUOTES.sub(r'\1', token) for token in line.split(',')]


def _read_header_line(file_path: str) -> Optional[str]:
    """Return the first line without its terminator, or None for an empty file."""
    with open(file_path, 'r', encoding='utf-8', newline='') as f:
        line = f.readline()
    if not line:
        return None
    return line.rstrip('\r\n')


class _StreamingCsvReader:
    """Shared chunked reading, error translation and read timeout."""

    operation = 'read_csv'

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, read_timeout: float = DEFAULT_READ_TIMEOUT):
        self.chunk_size = chunk_size
        self.read_timeout = read_timeout

    def _iter_chunks(self, file_path: str, width: int, skip_header: bool,
                     cancelled: threading.Event) -> Iterator[pd.DataFrame]:
        """
        Yield chunks of exactly ``width`` columns labelled 0..width-1.

        Rows may be ragged: short rows are padded with None and fields past
        ``width`` are dropped. Only quoting faults are framing errors.
        """
        try:
            reader = pd.read_csv(
                file_path,
                sep=',',
                header=None,
                names=list(range(width)),
                # Callable selection keeps every named column without bounds-checking
                # them against the first row, so wider rows are truncated
                usecols=lambda column: True,
                index_col=False,
                skiprows=1 if skip_header else 0,
                dtype=object,
                na_filter=False,
                encoding='utf-8',
                engine='python',
                chunksize=self.chunk_size,
            )
        except pd.errors.EmptyDataError:
            return

        with reader:
            for chunk in reader:
                if cancelled.is_set():
                    return
                yield chunk.where(chunk.notna(), None)

    def _run(self, file_path: str, work: Callable[[threading.Event], object]):
        """Run a full pass on a worker thread, waiting at most read_timeout seconds."""
        cancelled = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='csv-read')
        future = executor.submit(self._translate_errors, file_path, work, cancelled)
        try:
            return future.result(timeout=self.read_timeout)
        except FutureTimeoutError:
            cancelled.set()
            logging.error(f"Timed out after {self.read_timeout}s reading {file_path}")
            raise ReadTimeoutError(
                f"Read did not finish within {self.read_timeout} seconds",
                file_path=file_path,
                operation=self.operation
            )
        finally:
            executor.shutdown(wait=False)

    def _translate_errors(self, file_path: str, work: Callable[[threading.Event], object], cancelled: threading.Event):
        try:
            return work(cancelled)
        except pd.errors.ParserError as e:
            match = _LINE_NUMBER.search(str(e))
            raise ParseError(
                f"Malformed CSV: {e}",
                file_path=file_path,
                line=int(match.group(1)) if match else None
            )
        except UnicodeDecodeError as e:
            raise ParseError(f"CSV is not valid UTF-8: {e}", file_path=file_path)
        except FileNotFoundError:
            raise NotFoundError("CSV file not found", file_path=file_path)
        except PermissionError:
            raise AccessDeniedError("Permission denied reading CSV file", file_path=file_path)
        except OSError as e:
            raise FileReadError(f"Error reading CSV file: {e}", file_path=file_path, operation=self.operation)


class CsvProfiler(_StreamingCsvReader):
    """Infers column headers, column kinds and row count in one pass."""

    operation = 'profile_csv'

    def profile(self, file_path: str) -> CsvProfile:
        """
        Profile a CSV file.

        Args:
            file_path: Filesystem path of the CSV file

        Returns:
            CsvProfile with one entry per header column and the number of
            data rows (header line excluded)

        Raises:
            ParseError: If row framing is malformed
            FileReadError: If reading fails or times out
            NotFoundError: If the file does not exist
        """
        return self._run(file_path, lambda cancelled: self._profile(file_path, cancelled))

    def _profile(self, file_path: str, cancelled: threading.Event) -> CsvProfile:
        header_line = _read_header_line(file_path)
        if header_line is None:
            return CsvProfile(columns=[], rows=0)

        headers = parse_header_line(header_line)
        seen = [set() for _ in headers]
        rows = 0

        for chunk in self._iter_chunks(file_path, len(headers), skip_header=True, cancelled=cancelled):
            rows += len(chunk)
            for index, values in enumerate(seen):
                if len(values) > CATEGORY_MAX_DISTINCT:
                    # Already numeric; further values cannot change that
                    continue
                # Adding at most threshold+1 new values keeps the <= 5 test exact
                values.update(pd.unique(chunk[index])[:CATEGORY_MAX_DISTINCT + 1])

        columns = [
            ColumnProfile(
                header=header,
                type='category' if len(values) <= CATEGORY_MAX_DISTINCT else 'numeric'
            )
            for header, values in zip(headers, seen)
        ]
        logging.debug(f"Profiled {file_path}: {len(columns)} columns, {rows} rows")
        return CsvProfile(columns=columns, rows=rows)


class CsvColumnExtractor(_StreamingCsvReader):
    """Extracts selected columns from every line of a CSV file."""

    operation = 'extract_csv_columns'

    def extract(self, file_path: str, column_indices: Sequence[int]) -> List[Tuple[Optional[str], ...]]:
        """
        Extract columns by index, in the order requested.

        Every line of the file, header line included, becomes one tuple.
        Indices outside a row (negative or past its last field) give None in
        that position.

        Raises:
            ParseError: If row framing is malformed
            FileReadError: If reading fails or times out
            NotFoundError: If the file does not exist
        """
        indices = list(column_indices)
        return self._run(file_path, lambda cancelled: self._extract(file_path, indices, cancelled))

    def _extract(self, file_path: str, column_indices: List[int], cancelled: threading.Event) -> List[Tuple[Optional[str], ...]]:
        # Only the columns up to the highest requested index are read
        width = max([index + 1 for index in column_indices if index >= 0], default=1)
        positions = [index if index >= 0 else None for index in column_indices]

        result = []
        for chunk in self._iter_chunks(file_path, width, skip_header=False, cancelled=cancelled):
            for row in chunk.itertuples(index=False, name=None):
                result.append(tuple(row[pos] if pos is not None else None for pos in positions))
        return result


def get_csv_profile(file_path: str, chunk_size: int = DEFAULT_CHUNK_SIZE,
                    read_timeout: float = DEFAULT_READ_TIMEOUT) -> CsvProfile:
    """Convenience wrapper around CsvProfiler.profile."""
    return CsvProfiler(chunk_size, read_timeout).profile(file_path)


def get_csv_columns(file_path: str, column_indices: Sequence[int], chunk_size: int = DEFAULT_CHUNK_SIZE,
                    read_timeout: float = DEFAULT_READ_TIMEOUT) -> List[Tuple[Optional[str], ...]]:
    """Convenience wrapper around CsvColumnExtractor.extract."""
    return CsvColumnExtractor(chunk_size, read_timeout).extract(file_path, column_indices)
