"""Readers for the telephony platform's spreadsheet exports.

Two layouts exist. The small "received calls" workbook has a single header
line and fixed columns. The monthly queue report carries a few title lines
above its header, so the header row has to be located first, and it lacks a
queue/state value on some rows (both are recovered from the upload file name
and the caller's area code).
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pandas as pd

from callcore.cells import (
    MIN_REPORT_COLUMNS,
    as_frame,
    cell_at,
    cell_text,
    detect_period_from_filename,
    detect_queue_from_filename,
    find_header_row,
    is_number,
    optional_text,
    read_duration,
    read_instant,
    region_from_phone,
    row_cells,
    row_width,
    sanitize_cell,
)
from callcore.records import CanonicalRecord, Diagnostics, ParseResult, StructuralError
from callcore.status import normalize_status

logger = logging.getLogger(__name__)

QUEUE_HEADER_TOKENS = ("queue", "fila")

# Fixed positions of the received-calls workbook.
TABLE_COLUMNS = {
    "queue": 0,
    "phone": 1,
    "status": 2,
    "started_at": 3,
    "answered_at": 4,
    "ended_at": 5,
    "wait": 6,
    "handle_seconds": 7,
    "handle": 8,
    "extension": 9,
    "operator": 10,
}

# Positions relative to the located header row of the queue report.
REPORT_COLUMNS = {
    "queue": 0,
    "status": 1,
    "started_at": 2,
    "answered_at": 3,
    "ended_at": 4,
    "duration_seconds": 5,
    "extension": 6,
    "operator": 7,
    "duration": 8,
    "wait": 9,
    "call_id": 10,
    "reason": 11,
    "phone": 12,
    "region": 13,
}


def _generated_id(filename: Optional[str], idx: int) -> str:
    # Blank call ids are positional, so they are only unique within one file.
    return f"{filename}#row-{idx}" if filename else f"row-{idx}"


class PhoneTableParser:
    """Received-calls workbook: header on the first line, fixed columns."""

    source = "phone_table"

    def parse(self, raw: object, *, filename: Optional[str] = None) -> ParseResult:
        df = as_frame(raw)
        if df.empty:
            raise StructuralError(["file is empty"])

        col = TABLE_COLUMNS
        fallback_queue = detect_queue_from_filename(filename)
        diagnostics = Diagnostics(detected_queue=fallback_queue)
        records: List[CanonicalRecord] = []
        for idx in range(1, len(df)):
            cells = row_cells(df, idx)
            phone = cell_text(cell_at(cells, col["phone"]))
            if not phone:
                diagnostics.skipped_rows += 1
                continue

            handle = read_duration(cell_at(cells, col["handle"]), diagnostics)
            if not handle and is_number(cell_at(cells, col["handle_seconds"])):
                handle = max(int(float(cell_at(cells, col["handle_seconds"]))), 0)

            records.append(
                CanonicalRecord(
                    id=str(len(records) + 1),
                    queue=cell_text(cell_at(cells, col["queue"])) or fallback_queue,
                    phone=phone,
                    outcome=normalize_status(cell_at(cells, col["status"])),
                    started_at=read_instant(cell_at(cells, col["started_at"]), diagnostics),
                    answered_at=read_instant(cell_at(cells, col["answered_at"]), diagnostics),
                    ended_at=read_instant(cell_at(cells, col["ended_at"]), diagnostics),
                    wait_seconds=read_duration(cell_at(cells, col["wait"]), diagnostics),
                    handle_seconds=handle,
                    extension=optional_text(cell_at(cells, col["extension"])),
                    operator=optional_text(cell_at(cells, col["operator"])),
                )
            )

        if not records:
            raise StructuralError(["no valid rows found"])
        logger.info(
            "phone table %s: %d records, %d rows skipped, %d unparsed fields",
            filename or "<buffer>",
            len(records),
            diagnostics.skipped_rows,
            diagnostics.unparsed_fields,
        )
        return ParseResult(tuple(records), diagnostics)


class PhoneReportParser:
    """Monthly queue report: header searched in the first rows, 13+ columns."""

    source = "phone_report"

    def validate(self, df: pd.DataFrame) -> int:
        """Return the header row index or raise listing every failed check."""
        if df.empty:
            raise StructuralError(["file is empty"])

        errors: List[str] = []
        header_idx = find_header_row(df, QUEUE_HEADER_TOKENS)
        if header_idx is None:
            errors.append("queue column not found in the first 10 rows")
            raise StructuralError(errors)

        data_rows = [row_cells(df, i) for i in range(header_idx + 1, len(df))]
        data_rows = [cells for cells in data_rows if row_width(cells) > 0]
        if not data_rows:
            errors.append("no data rows after the header")
        else:
            wide_rows = [cells for cells in data_rows if row_width(cells) >= MIN_REPORT_COLUMNS]
            if not wide_rows:
                errors.append(f"no data row has at least {MIN_REPORT_COLUMNS} columns")
            elif not any(is_number(cell_at(cells, REPORT_COLUMNS["duration_seconds"])) for cells in wide_rows):
                errors.append("no row with a numeric call duration")
        if errors:
            raise StructuralError(errors)
        return header_idx

    def parse(self, raw: object, *, filename: Optional[str] = None) -> ParseResult:
        df = as_frame(raw)
        header_idx = self.validate(df)

        col = REPORT_COLUMNS
        detected_queue = detect_queue_from_filename(filename)
        diagnostics = Diagnostics(
            detected_queue=detected_queue,
            period=detect_period_from_filename(filename),
        )
        records: List[CanonicalRecord] = []
        seen_ids = set()
        for idx in range(header_idx + 1, len(df)):
            cells = row_cells(df, idx)
            if row_width(cells) < MIN_REPORT_COLUMNS:
                diagnostics.skipped_rows += 1
                continue

            call_id = sanitize_cell(cell_at(cells, col["call_id"])) or _generated_id(filename, idx)
            if call_id in seen_ids:
                diagnostics.skipped_rows += 1
                continue
            seen_ids.add(call_id)

            phone = sanitize_cell(cell_at(cells, col["phone"]))
            region = sanitize_cell(cell_at(cells, col["region"])) or region_from_phone(phone)
            if region not in diagnostics.regions:
                diagnostics.regions.append(region)

            duration = cell_at(cells, col["duration_seconds"])
            if is_number(duration):
                handle = max(int(float(duration)), 0)
            else:
                handle = read_duration(cell_at(cells, col["duration"]), diagnostics)

            records.append(
                CanonicalRecord(
                    id=call_id,
                    queue=sanitize_cell(cell_at(cells, col["queue"])) or detected_queue,
                    phone=phone,
                    outcome=normalize_status(sanitize_cell(cell_at(cells, col["status"]))),
                    started_at=read_instant(cell_at(cells, col["started_at"]), diagnostics),
                    answered_at=read_instant(cell_at(cells, col["answered_at"]), diagnostics),
                    ended_at=read_instant(cell_at(cells, col["ended_at"]), diagnostics),
                    wait_seconds=read_duration(cell_at(cells, col["wait"]), diagnostics),
                    handle_seconds=handle,
                    extension=sanitize_cell(cell_at(cells, col["extension"])) or None,
                    operator=sanitize_cell(cell_at(cells, col["operator"])) or None,
                    region=region,
                    reason=sanitize_cell(cell_at(cells, col["reason"])) or None,
                )
            )

        if not records:
            raise StructuralError(["no valid rows found"])
        logger.info(
            "phone report %s: %d records, %d rows skipped, queue=%s period=%s",
            filename or "<buffer>",
            len(records),
            diagnostics.skipped_rows,
            detected_queue,
            diagnostics.period,
        )
        return ParseResult(tuple(records), diagnostics)
