from __future__ import annotations

import io
import logging
from typing import Dict, List, Optional, Tuple

import pandas as pd

from callcore.cells import cell_text, normalize_header, read_duration, read_instant, strip_quotes
from callcore.records import CanonicalRecord, Diagnostics, ParseResult, StructuralError
from callcore.status import normalize_status

logger = logging.getLogger(__name__)

# Normalized header names of the chat platform's ticket export.
CHAT_COLUMNS = {
    "opened": ("opendate",),
    "stored": ("storagedate",),
    "queue": ("team",),
    "phone": ("userphone",),
    "status": ("status",),
    "wait": ("queuetime",),
    "handle": ("operationaltime",),
    "operator": ("agentname",),
    "id": ("id", "sequentialid"),
}


def detect_delimiter(first_line: str) -> str:
    return ";" if ";" in first_line else ","


def _platform_status(raw: str) -> str:
    # The chat platform reports dropped conversations as "Canceled".
    return "abandoned" if "cancel" in raw.lower() else raw


class ChatCsvParser:
    """Delimited chat ticket export (one conversation per line)."""

    source = "chat_csv"

    def read_frame(self, raw: object) -> Tuple[pd.DataFrame, int]:
        """Return the frame and the number of malformed lines skipped."""
        text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else str(raw or "")
        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            raise StructuralError(["file is empty"])

        bad_lines = []

        def _skip(fields: List[str]) -> None:
            bad_lines.append(fields)
            return None

        df = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=detect_delimiter(lines[0]),
            dtype=str,
            keep_default_na=False,
            engine="python",
            on_bad_lines=_skip,
        )
        df.columns = [strip_quotes(c) for c in df.columns]
        return df, len(bad_lines)

    def resolve_columns(self, df: pd.DataFrame) -> Dict[str, Optional[str]]:
        by_key = {normalize_header(c): c for c in df.columns}
        resolved = {
            field: next((by_key[name] for name in names if name in by_key), None)
            for field, names in CHAT_COLUMNS.items()
        }
        if resolved["opened"] is None and resolved["stored"] is None:
            raise StructuralError(["date column not found (OpenDate or StorageDate)"])
        return resolved

    def parse(self, raw: object, *, filename: Optional[str] = None) -> ParseResult:
        df, bad_lines = self.read_frame(raw)
        cols = self.resolve_columns(df)
        diagnostics = Diagnostics(skipped_rows=bad_lines)

        def value(row: Dict[str, object], field: str) -> str:
            column = cols[field]
            return strip_quotes(row.get(column)) if column else ""

        records: List[CanonicalRecord] = []
        seen_ids = set()
        for idx, row in enumerate(df.to_dict(orient="records")):
            raw_date = value(row, "opened") or value(row, "stored")
            started_at = read_instant(raw_date, diagnostics)
            if started_at is None:
                # Undated chats are dropped, not just left out of time views.
                diagnostics.skipped_rows += 1
                continue

            record_id = value(row, "id") or f"chat-{idx}"
            if record_id in seen_ids:
                diagnostics.skipped_rows += 1
                continue
            seen_ids.add(record_id)

            records.append(
                CanonicalRecord(
                    id=record_id,
                    queue=value(row, "queue") or "Unknown",
                    phone=value(row, "phone"),
                    outcome=normalize_status(_platform_status(value(row, "status"))),
                    started_at=started_at,
                    wait_seconds=read_duration(value(row, "wait"), diagnostics),
                    handle_seconds=read_duration(value(row, "handle"), diagnostics),
                    operator=cell_text(value(row, "operator")) or None,
                    channel="chat",
                )
            )

        if not records:
            raise StructuralError(["no valid rows found"])
        logger.info(
            "chat export %s: %d records, %d rows dropped",
            filename or "<buffer>",
            len(records),
            diagnostics.skipped_rows,
        )
        return ParseResult(tuple(records), diagnostics)
