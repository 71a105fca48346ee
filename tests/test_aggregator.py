from datetime import datetime, timezone

from b3scraper.core.aggregator import combine, filter_holders
from b3scraper.models import DetailsFragment, DividendEvent, HistorySeries, HolderEntry, SeriesPoint


def _history(**overrides):
    data = dict(
        debt_by_annual_equity=45.2,
        earnings_per_share=(SeriesPoint(datetime(2023, 1, 31, tzinfo=timezone.utc), 1.5),),
        net_margin=(SeriesPoint(datetime(2023, 12, 31, tzinfo=timezone.utc), None),),
    )
    data.update(overrides)
    return HistorySeries(**data)


def test_filter_holders_drops_aggregate_rows_any_case():
    holders = [
        HolderEntry("Acionista A"),
        HolderEntry("Outros"),
        HolderEntry("ACOESTESOURARIA"),
        HolderEntry("Acionista B"),
        HolderEntry("outros"),
        HolderEntry("AcoesTesouraria"),
    ]
    assert [h.name for h in filter_holders(holders)] == ["Acionista A", "Acionista B"]


def test_combine_builds_canonical_record():
    details = DetailsFragment(price=12.34, business="Bancos", price_to_earnings=5.67)
    events = [
        DividendEvent(datetime(2021, 3, 15), 0.52, "JRS CAP PROPRIO"),
        DividendEvent(datetime(2020, 1, 1), 1.1, "DIVIDENDO"),
    ]
    holders = [HolderEntry("Acionista A", 10.0, 0.0, 5.0), HolderEntry("Outros", 90.0, 100.0, 95.0)]

    record = combine("TEST4", details, holders, events, _history())

    assert record.name == "TEST4"
    assert record.business == "Bancos"
    assert record.current_state.price == 12.34
    assert record.current_state.price_to_earnings == 5.67
    assert record.current_state.debt_by_annual_equity == 45.2
    assert [h.name for h in record.current_state.holders] == ["Acionista A"]
    assert [e.date for e in record.events] == [datetime(2021, 3, 15), datetime(2020, 1, 1)]
    assert record.earnings_per_share[0].value == 1.5


def test_combine_keeps_missing_values_missing():
    details = DetailsFragment(price=10.0, business="", price_to_earnings=None)
    record = combine("TEST4", details, [], [], _history(debt_by_annual_equity=None))

    document = record.to_document()
    assert document["currentState"]["priceToEarnings"] is None
    assert document["currentState"]["debtByAnnualEquity"] is None
    assert document["history"]["netMargin"][0]["value"] is None


def test_to_document_shape_and_timestamps():
    details = DetailsFragment(price=12.34, business="Bancos", price_to_earnings=5.67)
    events = [DividendEvent(datetime(2021, 3, 15), 0.52, "DIVIDENDO")]
    record = combine("TEST4", details, [HolderEntry("Acionista A", 1.0, 2.0, 3.0)], events, _history())

    document = record.to_document()

    assert set(document) == {"name", "business", "currentState", "events", "history"}
    assert document["currentState"]["holders"] == [
        {"name": "Acionista A", "ordinaryShares": 1.0, "preferredShares": 2.0, "totalShares": 3.0}
    ]
    assert document["events"][0]["date"] == int(datetime(2021, 3, 15).timestamp() * 1000)
    assert document["history"]["earningsPerShare"][0]["period"] == 1675123200000
    assert document["history"]["netMargin"][0]["period"] == 1703980800000
