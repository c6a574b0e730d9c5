"""
Scanners stream rows out of a session.

A Scanner is bound to one ClusterSession and a fixed list of column names.
Rows come back page by page (``ReadConf.fetch_size_in_rows`` per page) and
are projected onto those columns, either one dict at a time or as Polars
DataFrame batches.

Example:
    ```python
    with factory.get_scanner(session, ["id", "name"]) as scanner:
        for batch in scanner.scan("SELECT id, name FROM ks.users").batches(5_000):
            process(batch)
    ```
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple

import polars as pl
from cassandra.query import SimpleStatement

from hearth.configs.read_config import ReadConf
from hearth.messages import get_logger
from hearth.utility.exceptions import ScanError

if TYPE_CHECKING:
    from hearth.connections.session import ClusterSession


def project_row(row: Any, column_names: Sequence[str]) -> Dict[str, Any]:
    """
    Keep only ``column_names`` from a driver row, in that order.

    Raises:
        ScanError: If the row has no value for one of the columns
    """
    if not isinstance(row, Mapping):
        if not hasattr(row, "_asdict"):
            raise ScanError(f"Cannot project row of type {type(row).__name__}")
        row = row._asdict()

    missing = [name for name in column_names if name not in row]
    if missing:
        raise ScanError(
            f"Columns {missing} not in row; available columns: {sorted(row)}"
        )
    return {name: row[name] for name in column_names}


class ScanResult:
    """
    Rows of one scan, projected onto the scanner's columns.

    Iterating pulls pages from the cluster as needed. A ScanResult can be
    consumed once, either row by row or through ``batches``.
    """

    def __init__(self, rows: Iterable[Any], column_names: Sequence[str]):
        self._rows = iter(rows)
        self.column_names: Tuple[str, ...] = tuple(column_names)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for row in self._rows:
            yield project_row(row, self.column_names)

    def batches(self, batch_size: int) -> Iterator[pl.DataFrame]:
        """
        Yield the remaining rows as DataFrames of at most ``batch_size`` rows.

        Empty batches are never yielded.
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        batch = []
        for row in self:
            batch.append(row)
            if len(batch) >= batch_size:
                yield self._to_frame(batch)
                batch = []
        if batch:
            yield self._to_frame(batch)

    def _to_frame(self, rows) -> pl.DataFrame:
        return pl.DataFrame(
            {name: [row[name] for row in rows] for name in self.column_names}
        )


class Scanner(ABC):
    """
    Base class for scanners.

    The scanner borrows its session: closing a scanner leaves the session
    open for the caller to close.
    """

    def __init__(
        self,
        session: "ClusterSession",
        column_names: Sequence[str],
        read_conf: Optional[ReadConf] = None,
    ):
        if not column_names:
            raise ValueError("A scanner needs at least one column name")
        self.session = session
        self.column_names: Tuple[str, ...] = tuple(column_names)
        self.read_conf = read_conf or ReadConf()
        self._closed = False

    @abstractmethod
    def scan(self, statement: Any, parameters: Any = None) -> ScanResult:
        """Run ``statement`` and return its rows."""

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "Scanner":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class DefaultScanner(Scanner):
    """Pages through a statement with the driver's automatic paging."""

    def __init__(
        self,
        session: "ClusterSession",
        column_names: Sequence[str],
        read_conf: Optional[ReadConf] = None,
    ):
        super().__init__(session, column_names, read_conf)
        self.logger = get_logger("hearth.scanner")

    def scan(self, statement: Any, parameters: Any = None) -> ScanResult:
        """
        Run ``statement`` with the configured page size and consistency.

        Args:
            statement: CQL string or a driver Statement; Statements are used
                as given
            parameters: Bind values for the statement

        Raises:
            ScanError: If the scanner is closed or the statement fails
        """
        if self._closed:
            raise ScanError("Scanner is closed")

        if isinstance(statement, str):
            statement = SimpleStatement(
                statement,
                fetch_size=self.read_conf.fetch_size_in_rows,
                consistency_level=self.read_conf.driver_consistency_level,
            )

        self.logger.debug(
            f"Scanning {list(self.column_names)} "
            f"({self.read_conf.fetch_size_in_rows} rows per page, "
            f"{self.read_conf.consistency_level})"
        )
        try:
            rows = self.session.execute(statement, parameters)
        except Exception as e:
            raise ScanError(f"Scan failed: {e}") from e
        return ScanResult(rows, self.column_names)
