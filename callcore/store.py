"""In-memory dataset holder and explicit load state.

Aggregations never look at module state: callers hand them
``store.records(...)``. A load builds the new ``Dataset`` completely before it
is swapped in, so a failed or interrupted load leaves the previous data
untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from callcore.records import CanonicalRecord, Diagnostics, ParseResult, QueueSummaryRow, StructuralError
from callcore.timeparse import calendar_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    records: Tuple[CanonicalRecord, ...] = ()
    summary_rows: Tuple[QueueSummaryRow, ...] = ()
    diagnostics: Tuple[Diagnostics, ...] = ()
    source: str = ""
    filenames: Tuple[str, ...] = ()

    @property
    def skipped_rows(self) -> int:
        return sum(d.skipped_rows for d in self.diagnostics)

    @property
    def period(self) -> Optional[str]:
        return next((d.period for d in self.diagnostics if d.period), None)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    filename: Optional[str] = None


@dataclass(frozen=True)
class Failed:
    errors: List[str] = field(default_factory=list)
    message: str = ""


@dataclass(frozen=True)
class Loaded:
    dataset: Dataset
    fallback_from: Optional[Failed] = None


LoadState = Union[Idle, Loading, Loaded, Failed]


def dataset_from_result(result: ParseResult, *, source: str, filename: Optional[str] = None) -> Dataset:
    records = tuple(r for r in result.records if isinstance(r, CanonicalRecord))
    summary_rows = tuple(r for r in result.records if isinstance(r, QueueSummaryRow))
    return Dataset(
        records=records,
        summary_rows=summary_rows,
        diagnostics=(result.diagnostics,),
        source=source,
        filenames=(filename,) if filename else (),
    )


def scope_ids(dataset: Dataset, prefix: str) -> Dataset:
    """Prefix record ids so positional ids from different files cannot collide."""
    records = tuple(replace(r, id=f"{prefix}#{r.id}") for r in dataset.records)
    return replace(dataset, records=records)


def merge_datasets(*datasets: Dataset) -> Dataset:
    """Combine several loads; a record id seen again replaces the earlier one."""
    merged: Dict[str, CanonicalRecord] = {}
    summary_rows: List[QueueSummaryRow] = []
    diagnostics: List[Diagnostics] = []
    filenames: List[str] = []
    sources: List[str] = []
    for ds in datasets:
        for record in ds.records:
            merged[record.id] = record
        summary_rows.extend(ds.summary_rows)
        diagnostics.extend(ds.diagnostics)
        filenames.extend(ds.filenames)
        if ds.source and ds.source not in sources:
            sources.append(ds.source)
    return Dataset(
        records=tuple(merged.values()),
        summary_rows=tuple(summary_rows),
        diagnostics=tuple(diagnostics),
        source="+".join(sources),
        filenames=tuple(filenames),
    )


def filter_window(
    records: Iterable[CanonicalRecord],
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Tuple[CanonicalRecord, ...]:
    """Keep records whose local calendar day is inside ``[start_date, end_date]``.

    Without a complete window every record is kept, undated ones included.
    """
    records = tuple(records)
    if not (start_date and end_date):
        return records
    out = []
    for record in records:
        day = calendar_day(record.started_at)
        if day is not None and start_date <= day <= end_date:
            out.append(record)
    return tuple(out)


class RecordStore:
    def __init__(self, dataset: Optional[Dataset] = None):
        self._dataset = dataset or Dataset()
        self.state: LoadState = Loaded(self._dataset) if dataset is not None else Idle()

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    def records(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Tuple[CanonicalRecord, ...]:
        return filter_window(self._dataset.records, start_date, end_date)

    def replace(self, dataset: Dataset, *, fallback_from: Optional[Failed] = None) -> Loaded:
        self._dataset = dataset
        self.state = Loaded(dataset, fallback_from=fallback_from)
        return self.state

    def load(self, loader: Callable[[], Dataset], *, filename: Optional[str] = None) -> LoadState:
        previous = self.state
        self.state = Loading(filename)
        try:
            dataset = loader()
        except StructuralError as exc:
            logger.warning("load of %s failed: %s", filename or "dataset", exc)
            self.state = Failed(errors=exc.errors, message=str(exc))
            return self.state
        except Exception:
            self.state = previous
            raise
        logger.info(
            "loaded %s: %d records, %d queue summaries, %d rows skipped",
            filename or dataset.source or "dataset",
            len(dataset.records),
            len(dataset.summary_rows),
            dataset.skipped_rows,
        )
        return self.replace(dataset)


def load_into(store: RecordStore, loader: Callable[[], Dataset], *, filename: Optional[str] = None) -> LoadState:
    return store.load(loader, filename=filename)


def load_with_fallback(
    store: RecordStore,
    loader: Callable[[], Dataset],
    fallback: Callable[[], Dataset],
    *,
    filename: Optional[str] = None,
) -> LoadState:
    """Try ``loader``; on a structural failure swap in ``fallback()`` instead."""
    state = load_into(store, loader, filename=filename)
    if isinstance(state, Failed):
        logger.warning("using fallback dataset: %s", state.message)
        return store.replace(fallback(), fallback_from=state)
    return state


def distinct_values(records: Sequence[CanonicalRecord], attr: str) -> List[str]:
    return sorted({getattr(r, attr) for r in records if getattr(r, attr)})
