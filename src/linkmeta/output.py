"""Streaming JSONL output for lookup results."""

import json
from pathlib import Path
from typing import TextIO

from .models import LinkRecord


class StreamingOutputWriter:
    """Writes link records and lookup failures to JSONL one at a time."""

    def __init__(self, output_path: str | Path):
        self.output_path = Path(output_path)
        self._file: TextIO | None = None
        self._count = 0
        self._errors = 0

    def __enter__(self) -> "StreamingOutputWriter":
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.output_path, "w", encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file is not None:
            self._file.close()
            self._file = None

    def _write(self, payload: dict):
        if self._file is None:
            raise RuntimeError("StreamingOutputWriter must be used as context manager")

        self._file.write(json.dumps(payload, ensure_ascii=False) + "\n")
        self._file.flush()
        self._count += 1

    def write_record(self, record: LinkRecord):
        """Write a single record to the output file."""
        self._write(record.to_dict())

    def write_error(self, url: str, error: Exception):
        """Write a failed lookup as {"url", "error", "kind"}."""
        self._write({"url": url, "error": str(error), "kind": type(error).__name__})
        self._errors += 1

    @property
    def count(self) -> int:
        """Number of lines written."""
        return self._count

    @property
    def errors(self) -> int:
        """Number of failed lookups written."""
        return self._errors
