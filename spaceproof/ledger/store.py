"""Append-only JSONL persistence for exported ledgers.

One receipt per line, in append order, each line independently parseable.
Writes take an exclusive file lock.
"""
import fcntl
from pathlib import Path
from typing import Callable, Iterable

from ..core.receipt import Receipt, parse_receipt_line


class LedgerStore:
    """Append-only receipt storage backed by a JSONL file.

    A store can be subscribed to a ReceiptLedger as an observer, which
    mirrors every appended receipt to disk.

    Attributes:
        path: Path to the JSONL file
    """

    def __init__(self, path: str | Path = "receipts.jsonl"):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.touch()

    def _write(self, mode: str, lines: Iterable[str]) -> None:
        with open(self.path, mode, encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                for line in lines:
                    f.write(line + "\n")
                f.flush()
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def append(self, receipt: Receipt) -> str:
        """Append receipt to the file.

        Returns:
            The receipt's payload_hash
        """
        self._write("a", [receipt.to_json()])
        return receipt.payload_hash

    def write_all(self, lines: Iterable[str]) -> int:
        """Replace file contents with an export. Returns line count."""
        lines = list(lines)
        self._write("w", lines)
        return len(lines)

    def read_lines(self) -> list[str]:
        with open(self.path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]

    def read_all(self) -> list[Receipt]:
        """Read all receipts.

        Raises:
            ReceiptFormatError: If any line is malformed
        """
        return [parse_receipt_line(line) for line in self.read_lines()]

    def query(self, predicate: Callable[[Receipt], bool]) -> list[Receipt]:
        return [r for r in self.read_all() if predicate(r)]

