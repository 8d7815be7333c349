from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class Source:
    name: str
    url: str


UA_MARKET = Source("Український ринок", "https://icu.ua/research/market-reviews")
US_MARKET = Source(
    "Американський ринок",
    "https://www.blackrock.com/us/individual/insights/blackrock-investment-institute/weekly-commentary",
)
GLOBAL_MARKET = Source(
    "Короткий огляд глобального ринку",
    "https://www.ib.barclays/our-insights/weekly-insights.html",
)
ECB_MARKET = Source(
    "Європейський ринок, квартальний огляд",
    "https://www.ecb.europa.eu/press/economic-bulletin/html/index.en.html",
)


@dataclass(frozen=True)
class SourceSet:
    """Which commentary sources a run lists in its prompt.

    Weekly sources are always included. Quarterly sources (the ECB economic
    bulletin) only show up from *quarterly_from_day* onwards in a month that
    starts a quarter, once the bulletin for that quarter is out.
    """

    weekly: tuple[Source, ...] = (UA_MARKET, US_MARKET, GLOBAL_MARKET)
    quarterly: tuple[Source, ...] = (ECB_MARKET,)
    quarter_start_months: frozenset[int] = field(
        default_factory=lambda: frozenset({1, 4, 7, 10})
    )
    quarterly_from_day: int = 14


def includes_quarterly(run_date: date, source_set: SourceSet) -> bool:
    return (
        run_date.month in source_set.quarter_start_months
        and run_date.day >= source_set.quarterly_from_day
    )


def build_sources(run_date: date, source_set: SourceSet | None = None) -> list[Source]:
    """Return the sources to list for *run_date*, weekly ones first."""
    source_set = source_set or SourceSet()
    sources = list(source_set.weekly)
    if includes_quarterly(run_date, source_set):
        sources.extend(source_set.quarterly)
    return sources
