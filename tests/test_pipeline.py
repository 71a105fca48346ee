from datetime import datetime

import pytest

from b3scraper.core.errors import PersistenceError, PresenceCheckFailed, TransportError
from b3scraper.core.pipeline import ScrapePipeline, SymbolState, check_presence
from b3scraper.core.storage import FileRecordStore
from b3scraper.models import DetailsFragment, DividendEvent, HistorySeries, HolderEntry
from b3scraper.symbols.universe import StaticSymbolUniverse

from conftest import FakeExtractor, run

GOOD_DETAILS = DetailsFragment(price=12.34, business="Bancos", price_to_earnings=5.67)


def build(store, symbols, details=None, holders=None, events=None, history=None):
    extractors = dict(
        details=details or FakeExtractor({}, default=GOOD_DETAILS),
        holders=holders or FakeExtractor({}, default=[
            HolderEntry("Acionista A"), HolderEntry("Outros"), HolderEntry("AcoesTesouraria"), HolderEntry("Acionista B"),
        ]),
        events=events or FakeExtractor({}, default=[
            DividendEvent(datetime(2021, 3, 15), 0.5, "DIVIDENDO"),
            DividendEvent(datetime(2020, 1, 1), 0.4, "DIVIDENDO"),
        ]),
        history=history or FakeExtractor({}, default=HistorySeries()),
    )
    pipeline = ScrapePipeline(universe=StaticSymbolUniverse(symbols, store), store=store, **extractors)
    return pipeline, extractors


def test_check_presence():
    check_presence("TEST4", GOOD_DETAILS)
    with pytest.raises(PresenceCheckFailed):
        check_presence("TEST4", DetailsFragment(price=None))


def test_run_persists_every_symbol(file_store):
    pipeline, _ = build(file_store, ["PETR4", "VALE3"])
    summary = run(pipeline.run())

    assert summary.succeeded == ["PETR4", "VALE3"]
    assert summary.failed == []
    assert run(file_store.list_symbols()) == ["PETR4", "VALE3"]


def test_persisted_holders_and_events(file_store):
    pipeline, _ = build(file_store, ["PETR4"])
    run(pipeline.run())

    record = run(file_store.get("PETR4"))
    assert [h.name for h in record.current_state.holders] == ["Acionista A", "Acionista B"]
    assert [e.date for e in record.events] == [datetime(2021, 3, 15), datetime(2020, 1, 1)]


def test_missing_price_skips_remaining_fetches(file_store):
    details = FakeExtractor({"BAD3": DetailsFragment(price=None, business="x")}, default=GOOD_DETAILS)
    pipeline, extractors = build(file_store, ["BAD3"], details=details)

    summary = run(pipeline.run())

    outcome = summary.outcomes[0]
    assert outcome.state is SymbolState.FAILED
    assert outcome.failed_after is SymbolState.DETAILS_FETCHED
    assert "BAD3" in outcome.error
    assert extractors["holders"].calls == []
    assert extractors["events"].calls == []
    assert extractors["history"].calls == []
    assert not run(file_store.exists("BAD3"))


def test_transport_failure_is_isolated_to_one_symbol(file_store):
    details = FakeExtractor(
        {"B": TransportError("fundamentus unreachable", url="https://fundamentus.com.br/detalhes.php")},
        default=GOOD_DETAILS,
    )
    pipeline, _ = build(file_store, ["A", "B", "C"], details=details)

    summary = run(pipeline.run())

    assert summary.succeeded == ["A", "C"]
    assert summary.failed == ["B"]
    assert run(file_store.list_symbols()) == ["A", "C"]


def test_late_fragment_failure_writes_nothing(file_store):
    history = FakeExtractor({"B": TransportError("yahoo down", status_code=503)}, default=HistorySeries())
    pipeline, _ = build(file_store, ["A", "B"], history=history)

    summary = run(pipeline.run())

    assert summary.outcomes[1].failed_after is SymbolState.PRESENCE_CHECKED
    assert run(file_store.list_symbols()) == ["A"]


def test_unexpected_exception_does_not_stop_run(file_store):
    holders = FakeExtractor({"A": RuntimeError("boom")}, default=[])
    pipeline, _ = build(file_store, ["A", "B"], holders=holders)

    summary = run(pipeline.run())

    assert summary.failed == ["A"]
    assert summary.succeeded == ["B"]
    assert "RuntimeError" in summary.outcomes[0].error


class FailingStore(FileRecordStore):
    async def upsert(self, record):
        if record.name == "A":
            raise PersistenceError("disk full", symbol=record.name, operation="upsert")
        await super().upsert(record)


def test_persistence_error_is_isolated(tmp_path):
    store = FailingStore(tmp_path / "data")
    pipeline, _ = build(store, ["A", "B"])

    summary = run(pipeline.run())

    assert summary.outcomes[0].failed_after is SymbolState.AGGREGATED
    assert summary.succeeded == ["B"]


def test_second_run_processes_nothing(file_store):
    pipeline, extractors = build(file_store, ["PETR4", "VALE3"])
    run(pipeline.run())
    second = run(pipeline.run())

    assert second.outcomes == []
    assert extractors["details"].calls == ["PETR4", "VALE3"]


def test_interrupted_run_resumes_with_remaining_symbols(file_store):
    details = FakeExtractor({"VALE3": TransportError("timeout")}, default=GOOD_DETAILS)
    first, _ = build(file_store, ["PETR4", "VALE3", "ABEV3"], details=details)
    run(first.run())

    second, extractors = build(file_store, ["PETR4", "VALE3", "ABEV3"])
    summary = run(second.run())

    assert extractors["details"].calls == ["VALE3"]
    assert summary.succeeded == ["VALE3"]
