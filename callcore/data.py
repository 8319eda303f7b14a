from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from callcore.cells import MIN_REPORT_COLUMNS, as_frame, row_cells, row_width
from callcore.filters import DashboardFilters, normalize_filters
from callcore.records import CanonicalRecord, RowParser
from callcore.sample import sample_dataset
from callcore.source_chat import ChatCsvParser, detect_delimiter
from callcore.source_phone import PhoneReportParser, PhoneTableParser
from callcore.source_tickets import TicketQueueParser
from callcore.store import (
    Dataset,
    Failed,
    Loaded,
    LoadState,
    RecordStore,
    dataset_from_result,
    distinct_values,
    load_with_fallback,
    merge_datasets,
    scope_ids,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "planilhas"
FILE_GLOBS = ("*.xlsx", "*.csv")

# File name fragments of the ticket platform's per-queue summary export.
TICKET_SUMMARY_KEYWORDS = ("blip", "resumo-filas", "resumo_filas", "queue-summary", "queue_summary")

# Sources whose record ids are positions in the file, not real identifiers.
POSITIONAL_ID_SOURCES = ("phone_table", "chat_csv")

STORE = RecordStore()


def data_dir() -> Path:
    override = os.environ.get("CALLCORE_DATA_DIR")
    return Path(override) if override else DEFAULT_DATA_DIR


def get_source_files(directory: Optional[Path] = None) -> List[Path]:
    base = directory or data_dir()
    if not base.is_dir():
        return []
    files = {p for pattern in FILE_GLOBS for p in base.glob(pattern) if not p.name.startswith("~$")}
    return sorted(files)


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


def read_sheet(path: Path) -> pd.DataFrame:
    """First worksheet as positional cells, no header inference."""
    return pd.read_excel(path, sheet_name=0, header=None)


def read_text(path: Path) -> str:
    return path.read_bytes().decode("utf-8-sig")


def read_table_text(path: Path) -> pd.DataFrame:
    text = read_text(path)
    first = next((line for line in text.splitlines() if line.strip()), "")
    return pd.read_csv(
        path,
        sep=detect_delimiter(first),
        header=None,
        dtype=str,
        keep_default_na=False,
        encoding="utf-8-sig",
        skip_blank_lines=True,
    )


def is_ticket_summary(path: Path) -> bool:
    name = path.name.lower()
    return any(k in name for k in TICKET_SUMMARY_KEYWORDS)


def parser_for(path: Path, raw: object = None) -> RowParser:
    """Pick the reader for a file from its name and, for workbooks, its width.

    The wide phone report has at least 13 columns; the fixed phone table has 11.
    """
    if is_ticket_summary(path):
        return TicketQueueParser()
    if path.suffix.lower() == ".csv":
        return ChatCsvParser()
    df = as_frame(raw) if raw is not None else pd.DataFrame()
    widest = max((row_width(row_cells(df, i)) for i in range(len(df))), default=0)
    return PhoneReportParser() if widest >= MIN_REPORT_COLUMNS else PhoneTableParser()


def read_raw(path: Path) -> object:
    if path.suffix.lower() == ".csv":
        return read_table_text(path) if is_ticket_summary(path) else read_text(path)
    return read_sheet(path)


def load_file(path: Path) -> Dataset:
    raw = read_raw(path)
    parser = parser_for(path, raw)
    logger.debug("reading %s with %s", path.name, type(parser).__name__)
    result = parser.parse(raw, filename=path.name)
    dataset = dataset_from_result(result, source=parser.source, filename=path.name)
    if parser.source in POSITIONAL_ID_SOURCES:
        dataset = scope_ids(dataset, path.name)
    return dataset


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Dataset:
    return merge_datasets(*(load_file(Path(name)) for name, _ in files_sig))


def load_dashboard_data() -> Dataset:
    """Load every report in the data directory into ``STORE``.

    With no files, or when a file is structurally invalid, the bundled sample
    dataset is served instead and ``STORE.state`` records why.
    """
    files = get_source_files()
    if not files:
        logger.warning("no report files under %s; serving the sample dataset", data_dir())
        STORE.replace(sample_dataset(), fallback_from=Failed(["no report files found"], "no report files found"))
        return STORE.dataset
    sig = file_signature(files)
    state = load_with_fallback(STORE, lambda: _load_dashboard_data_cached(sig), sample_dataset, filename=str(data_dir()))
    return state.dataset


def load_state() -> LoadState:
    return STORE.state


def fallback_errors(state: LoadState) -> List[str]:
    if isinstance(state, Loaded) and state.fallback_from is not None:
        return list(state.fallback_from.errors)
    if isinstance(state, Failed):
        return list(state.errors)
    return []


def select_records(dataset: Dataset, filters: DashboardFilters) -> Tuple[CanonicalRecord, ...]:
    """Apply queue and operator selection; the date window is left to the aggregations."""
    records = dataset.records
    if filters.selected_queues:
        wanted = set(filters.selected_queues)
        records = tuple(r for r in records if r.queue in wanted)
    if filters.selected_operators:
        wanted = set(filters.selected_operators)
        records = tuple(r for r in records if r.operator in wanted)
    return records


def prepare_context(filters: dict | DashboardFilters, dataset: Dataset) -> Dict[str, object]:
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    summary_rows = dataset.summary_rows
    if filt.selected_queues:
        summary_rows = tuple(r for r in summary_rows if r.queue in set(filt.selected_queues))
    return {
        "filters": filt,
        "records": select_records(dataset, filt),
        "summary_rows": summary_rows,
        "queues": distinct_values(dataset.records, "queue"),
        "operators": distinct_values(dataset.records, "operator"),
        "source": dataset.source,
        "files": [Path(f).name for f in dataset.filenames],
        "period": dataset.period,
        "skipped_rows": dataset.skipped_rows,
        "unparsed_fields": sum(d.unparsed_fields for d in dataset.diagnostics),
    }
