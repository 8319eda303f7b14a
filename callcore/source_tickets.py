from __future__ import annotations

import logging
from typing import Dict, List, Optional

from callcore.cells import as_frame, cell_at, cell_text, is_number, normalize_header, read_duration, row_cells
from callcore.records import Diagnostics, ParseResult, QueueSummaryRow, StructuralError

logger = logging.getLogger(__name__)

# Normalized header -> QueueSummaryRow field. Portuguese names come from the
# ticket platform's "queues" report; English names from its translated UI.
HEADER_FIELDS: Dict[str, str] = {
    "fila": "queue",
    "queue": "queue",
    "ticketsfinalizados": "tickets",
    "closedtickets": "tickets",
    "ticketsclosed": "tickets",
    "tempomedioda1aresposta": "first_response_seconds",
    "tempomedioda1resposta": "first_response_seconds",
    "averagefirstresponsetime": "first_response_seconds",
    "tempomediodeespera": "wait_seconds",
    "averagewaittime": "wait_seconds",
    "averagewaitingtime": "wait_seconds",
    "tempomedioderesposta": "response_seconds",
    "averageresponsetime": "response_seconds",
    "tempomediodatendimento": "handle_seconds",
    "tempomediodeatendimento": "handle_seconds",
    "averagehandletime": "handle_seconds",
    "averageservicetime": "handle_seconds",
}

DURATION_FIELDS = ("first_response_seconds", "wait_seconds", "response_seconds", "handle_seconds")


class TicketQueueParser:
    """Per-queue ticket totals; every line is already an aggregate."""

    source = "ticket_queues"

    def parse(self, raw: object, *, filename: Optional[str] = None) -> ParseResult:
        df = as_frame(raw)
        if df.empty:
            raise StructuralError(["file is empty"])

        header = row_cells(df, 0)
        positions: Dict[str, int] = {}
        for idx, name in enumerate(header):
            field = HEADER_FIELDS.get(normalize_header(name))
            if field and field not in positions:
                positions[field] = idx
        if "queue" not in positions:
            raise StructuralError(["queue column not found"])

        diagnostics = Diagnostics()
        rows: List[QueueSummaryRow] = []
        for idx in range(1, len(df)):
            cells = row_cells(df, idx)
            queue = cell_text(cell_at(cells, positions["queue"]))
            if not queue:
                diagnostics.skipped_rows += 1
                continue
            tickets = cell_at(cells, positions["tickets"]) if "tickets" in positions else None
            values = {
                field: read_duration(cell_at(cells, positions[field]), diagnostics) if field in positions else 0
                for field in DURATION_FIELDS
            }
            rows.append(
                QueueSummaryRow(
                    queue=queue,
                    tickets=max(int(float(tickets)), 0) if is_number(tickets) else 0,
                    **values,
                )
            )

        logger.info("ticket queues %s: %d queues, %d rows skipped", filename or "<buffer>", len(rows), diagnostics.skipped_rows)
        return ParseResult(tuple(rows), diagnostics)
