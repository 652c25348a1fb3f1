"""Tokenized upload: header row plus ordered string rows."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RawTable(BaseModel):
    """Immutable result of tokenizing one uploaded file."""

    model_config = {"frozen": True}

    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def column_index(self, header: str) -> int:
        """Index of ``header`` or -1 when absent."""
        try:
            return self.headers.index(header)
        except ValueError:
            return -1

    def column(self, header: str, limit: int | None = None) -> list[str]:
        """Cells of one column; short rows yield empty strings."""
        idx = self.column_index(header)
        if idx == -1:
            return []
        rows = self.rows if limit is None else self.rows[:limit]
        return [row[idx] if idx < len(row) else "" for row in rows]
