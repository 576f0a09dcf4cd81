"""Injectable hooks the simulation core calls out to.

Every capability the core does not own lives here as a field on
``Collaborators``. Fields default to the package's own implementation or to a
no-op, so a league runs with ``Collaborators()`` and tests swap in recorders.
``recalc_overall``, ``generate_injury`` and ``apply_injury`` may be ``None``;
callers fall back or skip when they are.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from . import ratings
from .models import Injury, NewsItem, Player, Schedule, Team

if TYPE_CHECKING:
    from .league import League
    from .offseason import RetirementReport


def _noop(*_args: Any, **_kwargs: Any) -> None:
    return None


def _no_event(_league: League) -> dict[str, Any] | None:
    return None


def _default_schedule(teams: list[Team]) -> Schedule:
    from .schedule import build_season_schedule

    return build_season_schedule(teams)


def _default_retirements(league: League, year: int) -> RetirementReport:
    from .offseason import process_retirements

    return process_retirements(league, year, rng=random.Random(f"retire:{year}"))


def _default_awards(league: League, year: int) -> None:
    from .offseason import calculate_all_awards

    calculate_all_awards(league, year)


def _default_records(league: League, year: int) -> None:
    from .offseason import update_all_records

    update_all_records(league, year)


def _default_news(league: League, headline: str, story: str, kind: str) -> None:
    league.news.append(
        NewsItem(
            headline=headline,
            story=story,
            kind=kind,
            year=league.season.year,
            week=league.season.week,
        )
    )


@dataclass(slots=True)
class Collaborators:
    effective_performance: Callable[[float, float, random.Random], float] = ratings.game_performance
    add_xp: Callable[[Player, int], None] = ratings.add_xp
    recalc_overall: Callable[[str, dict[str, int]], int] | None = ratings.calculate_overall
    generate_schedule: Callable[[list[Team]], Schedule] = _default_schedule
    process_retirements: Callable[[League, int], RetirementReport] = _default_retirements
    calculate_all_awards: Callable[[League, int], None] = _default_awards
    update_all_records: Callable[[League, int], None] = _default_records
    process_cap_rollover: Callable[[Team], None] = _noop
    add_news_item: Callable[[League, str, str, str], None] = _default_news
    update_depth_chart: Callable[[Team], None] = _noop
    update_single_game_records: Callable[[League, int, int], None] = _noop
    start_playoffs: Callable[[League], None] = _noop
    generate_event: Callable[[League], dict[str, Any] | None] = _no_event
    save_point: Callable[[League, str], None] = _noop
    generate_injury: Callable[[Player, random.Random], Injury | None] | None = None
    apply_injury: Callable[[Player, Injury], None] | None = None
