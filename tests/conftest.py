import asyncio
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from b3scraper.core.config import Config
from b3scraper.core.errors import TransportError
from b3scraper.core.storage import FileRecordStore
from b3scraper.models import CurrentState, DividendEvent, HolderEntry, StockRecord


def details_html(price: str = "12,34", business: str = "Intermediação Financeira", pe: str = "5,67") -> str:
    return f"""
<html><body>
<div class="center"><div class="conteudo clearfix">
  <h1>Detalhes</h1>
  <table class="w728">
    <tr><td class="label w15"><span class="txt">Papel</span></td><td class="data w35"><span class="txt">TEST4</span></td>
        <td class="label w2"><span class="txt">Cotação</span></td><td class="data destaque w3"><span class="txt">{price}</span></td></tr>
    <tr><td class="label"><span class="txt">Tipo</span></td><td class="data"><span class="txt">PN</span></td></tr>
    <tr><td class="label"><span class="txt">Empresa</span></td><td class="data"><span class="txt">TEST SA</span></td></tr>
    <tr><td class="label"><span class="txt">Setor</span></td><td class="data"><span class="txt">Financeiro</span></td></tr>
    <tr><td class="label"><span class="txt">Subsetor</span></td><td class="data"><span class="txt">{business}</span></td></tr>
  </table>
  <h2>Oscilações</h2>
  <table class="w728">
    <tr><td class="nivel1" colspan="4"><span class="txt">Indicadores fundamentalistas</span></td></tr>
    <tr><td class="label"><span class="txt">Dia</span></td><td class="data"><span class="txt">1,0%</span></td>
        <td class="label"><span class="txt">P/L</span></td><td class="data w2"><span class="txt">{pe}</span></td></tr>
  </table>
</div></div>
</body></html>
"""


def holder_item(name: str, ordinary: str = "", preferred: str = "", total: str = "") -> str:
    return (
        f'<li><a href="#">{name}<table><tr>'
        f"<td>{ordinary}</td><td>{preferred}</td><td>{total}</td>"
        f"</tr></table></a></li>"
    )


def holders_html(items: List[str]) -> str:
    return (
        '<html><body><ul class="my-menu"><li>Composição<ul>'
        + "".join(items)
        + "</ul></li></ul></body></html>"
    )


def events_html(rows: List[tuple]) -> str:
    body = "".join(
        f"<tr><td>{date}</td><td>{amount}</td><td>{kind}</td><td>1</td></tr>"
        for date, amount, kind in rows
    )
    return (
        '<html><body><table id="resultado">'
        "<thead><tr><th>Data</th><th>Valor</th><th>Tipo</th><th>Por quantas ações</th></tr></thead>"
        f"<tbody>{body}</tbody></table></body></html>"
    )


def quote_summary(result: Optional[dict] = None, error: Optional[dict] = None) -> dict:
    return {"quoteSummary": {"result": [result] if result is not None else None, "error": error}}


SAMPLE_QUOTE_RESULT = {
    "earnings": {
        "financialsChart": {
            "yearly": [
                {"date": 2022, "revenue": {"raw": 1000, "fmt": "1k"}, "earnings": {"raw": 120.5, "fmt": "120.5"}},
                {"date": 2023, "revenue": {"raw": 1100, "fmt": "1.1k"}, "earnings": {"raw": 150.0, "fmt": "150"}},
            ]
        }
    },
    "incomeStatementHistory": {
        "incomeStatementHistory": [
            {"endDate": {"raw": 1703980800, "fmt": "2023-12-31"}, "netIncome": {"raw": 50}, "totalRevenue": {"raw": 200}},
            {"endDate": {"raw": 1672444800, "fmt": "2022-12-31"}, "netIncome": {"raw": 50}, "totalRevenue": {"raw": 0}},
        ]
    },
    "financialData": {"debtToEquity": {"raw": 45.2, "fmt": "45.20"}},
}


class FakeFetcher:
    """Serves canned bodies keyed by the last path segment of the URL."""

    def __init__(self, pages: Optional[Dict[str, object]] = None):
        self.pages = pages or {}
        self.calls = []

    def _lookup(self, url: str, params: Optional[dict]):
        key = url.rsplit("/", 1)[-1]
        self.calls.append((key, dict(params or {})))
        symbol = (params or {}).get("papel")
        body = self.pages.get((key, symbol), self.pages.get(key))
        if isinstance(body, Exception):
            raise body
        if body is None:
            raise TransportError(f"{url} answered with status 404", url=url, status_code=404)
        return body

    async def fetch_html(self, url: str, params=None, **kwargs):
        return self._lookup(url, params)

    async def fetch_json(self, url: str, params=None, **kwargs):
        return self._lookup(url, params)

    async def close(self):
        pass


class FakeExtractor:
    """Returns one fragment per symbol, or raises the configured error."""

    def __init__(self, results: Dict[str, object], default=None):
        self.results = results
        self.default = default
        self.calls: List[str] = []

    async def fetch(self, symbol: str):
        self.calls.append(symbol)
        result = self.results.get(symbol, self.default)
        if isinstance(result, Exception):
            raise result
        return result


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def file_store(tmp_path):
    return FileRecordStore(tmp_path / "data")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point Config at an empty settings file so tests never read config/settings.yaml."""
    settings = tmp_path / "settings.yaml"
    settings.write_text("{}\n", encoding="utf-8")
    monkeypatch.setenv("B3SCRAPER_CONFIG", str(settings))
    Config.reset()
    yield settings
    Config.reset()


def make_record(symbol="TEST4", price=12.34):
    return StockRecord(
        name=symbol,
        business="Bancos",
        current_state=CurrentState(
            price=price,
            price_to_earnings=None,
            debt_by_annual_equity=45.2,
            holders=(HolderEntry("Acionista A", 10.0, None, 5.0),),
        ),
        events=(DividendEvent(datetime(2021, 3, 15), 0.52, "DIVIDENDO"),),
    )
