from __future__ import annotations

import copy
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from .collaborators import Collaborators
from .development import DevelopmentReport, TrainingSettings, run_weekly_development
from .engine import GameOutcome, simulate_game
from .errors import ConfigurationError
from .models import (
    GameResult,
    NewsItem,
    Pairing,
    Schedule,
    SeasonPhase,
    SeasonState,
    Team,
    TeamRecord,
)
from .offseason import RolloverReport, apply_competitive_balance, prune_active_memory, run_season_rollover
from .stats import accumulate_season_stats

_log = logging.getLogger("gridiron_sim.league")

OverrideResults = dict[tuple[int, int], tuple[int, int]]

REQUIRED_HOOKS = ("effective_performance", "add_xp", "generate_schedule", "add_news_item")


@dataclass(slots=True)
class League:
    teams: list[Team]
    schedule: Schedule
    season: SeasonState
    training: TrainingSettings = field(default_factory=TrainingSettings)
    news: list[NewsItem] = field(default_factory=list)
    awards: dict[int, dict[str, dict[str, Any]]] = field(default_factory=dict)
    records: dict[str, dict[str, Any]] = field(default_factory=dict)
    retired_players: list[dict[str, Any]] = field(default_factory=list)
    past_results: dict[int, dict[int, list[GameResult]]] = field(default_factory=dict)
    pending_event: dict[str, Any] | None = None

    @property
    def week(self) -> int:
        return self.season.week

    @property
    def year(self) -> int:
        return self.season.year

    def team(self, index: int | None) -> Team | None:
        if index is None or not 0 <= index < len(self.teams):
            return None
        return self.teams[index]

    def standings(self) -> list[Team]:
        return sorted(
            self.teams,
            key=lambda t: (t.record.win_pct, t.record.point_diff, t.record.points_for),
            reverse=True,
        )


@dataclass(slots=True)
class WeekOutcome:
    status: str = "simulated"
    week: int = 0
    games_simulated: int = 0
    results: list[GameResult] = field(default_factory=list)
    news: list[NewsItem] = field(default_factory=list)
    development: DevelopmentReport | None = None
    rollover: RolloverReport | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "week": self.week,
            "gamesSimulated": self.games_simulated,
            "results": [result.to_dict() for result in self.results],
            "news": [item.to_dict() for item in self.news],
        }


@dataclass(slots=True)
class SeasonRunReport:
    weeks_simulated: int = 0
    paused: bool = False
    outcomes: list[WeekOutcome] = field(default_factory=list)


def require_collaborators(collaborators: Collaborators) -> None:
    missing = [name for name in REQUIRED_HOOKS if getattr(collaborators, name) is None]
    if missing:
        raise ConfigurationError(f"Missing required collaborators: {', '.join(missing)}")


def _play(home: Team, away: Team, seed: int, collaborators: Collaborators) -> GameOutcome | None:
    return simulate_game(home, away, random.Random(seed), collaborators)


def simulate_week(
    league: League,
    collaborators: Collaborators | None = None,
    rng: random.Random | None = None,
    override_results: OverrideResults | None = None,
    max_workers: int | None = None,
) -> WeekOutcome:
    """Play every pairing of the league's current week and advance the week counter.

    Games run concurrently, each with its own generator seeded from ``rng`` in
    pairing order, and are merged back in pairing order so a fixed seed yields
    identical output. ``override_results`` maps ``(home_idx, away_idx)`` to a
    final score and skips simulation for that game.
    """
    collaborators = collaborators or Collaborators()
    require_collaborators(collaborators)
    rng = rng or random.Random()
    overrides = override_results or {}
    season = league.season
    week_number = season.week

    if week_number < 1 or week_number > len(league.schedule):
        _log.warning(f"Week {week_number} is outside the {len(league.schedule)}-week schedule.")
        return WeekOutcome(status="no_week", week=week_number)
    if (week_number - 1) in season.results_by_week or season.last_simulated_week >= week_number:
        _log.warning(f"Week {week_number} of {season.year} was already simulated; ignoring repeat call.")
        return WeekOutcome(status="duplicate", week=week_number)

    # Game lines describe a single week; byes and override games must not carry last week's lines.
    for team in league.teams:
        team.stats.game = {}
        for player in team.roster:
            player.stats.game = {}

    news_start = len(league.news)
    pairings = league.schedule.week(week_number).games
    planned: list[tuple[int, Pairing, Team | None, Team | None]] = []
    seeds: dict[int, int] = {}
    scheduled: set[int] = set()
    for order, pairing in enumerate(pairings):
        if pairing.is_bye:
            planned.append((order, pairing, None, None))
            continue
        home = league.team(pairing.home)
        away = league.team(pairing.away)
        if home is None or away is None or home is away:
            _log.warning(f"Skipping week {week_number} pairing {pairing}: unknown team index.")
            continue
        if home.team_id in scheduled or away.team_id in scheduled:
            _log.warning(f"Skipping week {week_number} pairing {pairing}: team already scheduled this week.")
            continue
        scheduled.update((home.team_id, away.team_id))
        planned.append((order, pairing, home, away))
        if (pairing.home, pairing.away) not in overrides:
            seeds[order] = rng.getrandbits(64)

    outcomes: dict[int, GameOutcome | None] = {}
    if seeds:
        with ThreadPoolExecutor(max_workers=max_workers or len(seeds)) as pool:
            futures = {
                order: pool.submit(_play, home, away, seeds[order], collaborators)
                for order, _pairing, home, away in planned
                if order in seeds
            }
            for order, future in futures.items():
                try:
                    outcomes[order] = future.result()
                except Exception:
                    _log.exception(f"Game {order} of week {week_number} failed to simulate.")
                    outcomes[order] = None

    results: list[GameResult] = []
    games_simulated = 0
    played: set[int] = set()
    for order, pairing, home, away in planned:
        result_id = f"{season.year}-{week_number}-{order}"
        if pairing.is_bye:
            results.append(GameResult(id=result_id, week=week_number, year=season.year, bye=pairing.bye))
            continue
        if home is None or away is None:
            continue
        key = (pairing.home, pairing.away)
        if key in overrides:
            score_home, score_away = (int(v) for v in overrides[key])
            box_score: dict[str, dict[str, Any]] = {"home": {}, "away": {}}
        else:
            outcome = outcomes.get(order)
            if outcome is None:
                _log.warning(f"No result for {home.name} vs {away.name} in week {week_number}; skipped.")
                continue
            score_home, score_away = outcome.home_score, outcome.away_score
            # The box score was captured before this point; season totals only grow from here.
            box_score = outcome.box_score
            accumulate_season_stats(home)
            accumulate_season_stats(away)

        home.record.register_game(score_home, score_away)
        away.record.register_game(score_away, score_home)
        played.update((home.team_id, away.team_id))
        games_simulated += 1
        results.append(
            GameResult(
                id=result_id,
                week=week_number,
                year=season.year,
                home=pairing.home,
                away=pairing.away,
                home_name=home.name,
                away_name=away.name,
                score_home=score_home,
                score_away=score_away,
                box_score=box_score,
            )
        )

    season.results_by_week[week_number - 1] = results
    season.last_simulated_week = week_number
    season.week += 1

    for team in league.teams:
        for player in team.roster:
            player.tick_injuries()

    development: DevelopmentReport | None = None
    try:
        development = run_weekly_development(
            league, collaborators, random.Random(rng.getrandbits(64)), played_team_ids=played
        )
    except Exception:
        _log.exception(f"Weekly development failed after week {week_number}.")

    for team in league.teams:
        try:
            collaborators.update_depth_chart(team)
        except Exception:
            _log.exception(f"Depth chart update failed for {team.name}.")
        team.game_plan.reset()

    try:
        collaborators.update_single_game_records(league, season.year, week_number)
    except Exception:
        _log.exception(f"Single-game record update failed for week {week_number}.")

    _log.info(f"Week {week_number} of {season.year} complete: {games_simulated} games.")
    return WeekOutcome(
        status="simulated",
        week=week_number,
        games_simulated=games_simulated,
        results=results,
        news=list(league.news[news_start:]),
        development=development,
    )


class LeagueSimulator:
    """Season phase controller for one league.

    Every transition runs against a deep copy of the league and is swapped in
    only when it finishes, so an unexpected failure leaves the previous state
    in place. A transition asked of the wrong phase is a no-op.
    """

    def __init__(
        self,
        league: League,
        collaborators: Collaborators | None = None,
        seed: int | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.league = league
        self.collaborators = collaborators or Collaborators()
        require_collaborators(self.collaborators)
        self._rng = random.Random(seed)
        self._max_workers = max_workers
        self._busy = False

    @property
    def phase(self) -> SeasonPhase:
        return self.league.season.phase

    @property
    def week(self) -> int:
        return self.league.season.week

    @property
    def year(self) -> int:
        return self.league.season.year

    def is_regular_season_complete(self) -> bool:
        return self.league.season.week > len(self.league.schedule)

    def _transition(self, league: League, allowed: set[SeasonPhase], target: SeasonPhase) -> bool:
        current = league.season.phase
        if current not in allowed:
            _log.info(f"Ignoring {current.value} -> {target.value} transition.")
            return False
        league.season.phase = target
        _log.info(f"Season {league.season.year}: {current.value} -> {target.value}")
        return True

    def _save_point(self, league: League, reason: str) -> None:
        try:
            self.collaborators.save_point(league, reason)
        except Exception:
            _log.exception(f"Save point '{reason}' failed.")

    def _run(self, step: Any) -> Any:
        if self._busy:
            _log.info("Simulation already in progress; ignoring re-entrant call.")
            return None
        self._busy = True
        try:
            working = copy.deepcopy(self.league)
            outcome = step(working)
            self.league = working
            return outcome
        finally:
            self._busy = False

    def simulate_week(self, override_results: OverrideResults | None = None) -> WeekOutcome:
        outcome = self._run(lambda working: self._advance(working, override_results))
        return outcome if outcome is not None else WeekOutcome(status="busy", week=self.week)

    def _advance(self, league: League, override_results: OverrideResults | None) -> WeekOutcome:
        season = league.season
        if season.phase is SeasonPhase.OFFSEASON:
            return WeekOutcome(status="offseason", week=season.week)
        if season.phase is SeasonPhase.NEW_SEASON_READY:
            self._transition(league, {SeasonPhase.NEW_SEASON_READY}, SeasonPhase.REGULAR_SEASON)

        if season.week > len(league.schedule):
            if season.playoff_winner is not None:
                rollover = self._start_offseason(league)
                status = "offseason_started" if rollover is not None else "offseason"
                return WeekOutcome(status=status, week=season.week, rollover=rollover)
            if self._transition(league, {SeasonPhase.REGULAR_SEASON}, SeasonPhase.PLAYOFFS_PENDING):
                try:
                    self.collaborators.start_playoffs(league)
                except Exception:
                    _log.exception("Playoff start hook failed.")
                return WeekOutcome(status="playoffs_started", week=season.week)
            return WeekOutcome(status="awaiting_playoffs", week=season.week)

        outcome = simulate_week(
            league,
            self.collaborators,
            self._rng,
            override_results=override_results,
            max_workers=self._max_workers,
        )
        if outcome.status == "simulated":
            try:
                event = self.collaborators.generate_event(league)
            except Exception:
                _log.exception("Interactive event hook failed.")
                event = None
            if event is not None:
                league.pending_event = event
            self._save_point(league, "week")
        return outcome

    def simulate_season(self, max_weeks: int | None = None) -> SeasonRunReport:
        """Simulate weeks until the regular season ends or an interactive event is pending.

        Calling again after the event is resolved resumes from the paused week.
        """
        report = SeasonRunReport()
        while True:
            if self.league.pending_event is not None:
                report.paused = True
                break
            if max_weeks is not None and report.weeks_simulated >= max_weeks:
                break
            if self.phase not in (SeasonPhase.REGULAR_SEASON, SeasonPhase.NEW_SEASON_READY):
                break
            if self.is_regular_season_complete():
                break
            outcome = self.simulate_week()
            report.outcomes.append(outcome)
            if outcome.status != "simulated":
                break
            report.weeks_simulated += 1
        return report

    def resolve_pending_event(self) -> dict[str, Any] | None:
        event = self.league.pending_event
        self.league.pending_event = None
        return event

    def record_playoff_winner(self, team_id: int) -> bool:
        if self.league.team(team_id) is None:
            raise ValueError(f"Unknown team index {team_id}")
        if self.phase not in (SeasonPhase.REGULAR_SEASON, SeasonPhase.PLAYOFFS_PENDING):
            return False
        if not self.is_regular_season_complete():
            return False
        self.league.season.playoff_winner = team_id
        self.league.season.playoff_teams.add(team_id)
        return True

    def record_playoff_teams(self, team_ids: list[int]) -> bool:
        """Remember which teams made the playoff field, for legacy streaks at rollover."""
        unknown = [team_id for team_id in team_ids if self.league.team(team_id) is None]
        if unknown:
            raise ValueError(f"Unknown team indices {unknown}")
        if self.phase not in (SeasonPhase.REGULAR_SEASON, SeasonPhase.PLAYOFFS_PENDING):
            return False
        if not self.is_regular_season_complete():
            return False
        self.league.season.playoff_teams.update(team_ids)
        return True

    def _start_offseason(self, league: League) -> RolloverReport | None:
        if league.season.offseason:
            _log.info("League is already in the offseason.")
            return None
        if league.season.week <= len(league.schedule) or league.season.playoff_winner is None:
            _log.info("Offseason needs a finished regular season and a recorded playoff winner.")
            return None
        if not self._transition(
            league, {SeasonPhase.REGULAR_SEASON, SeasonPhase.PLAYOFFS_PENDING}, SeasonPhase.OFFSEASON
        ):
            return None
        league.season.offseason = True
        report = run_season_rollover(league, self.collaborators)
        self._save_point(league, "rollover")
        return report

    def start_offseason(self) -> RolloverReport | None:
        return self._run(self._start_offseason)

    def _start_new_season(self, league: League) -> bool:
        if not self._transition(league, {SeasonPhase.OFFSEASON}, SeasonPhase.NEW_SEASON_READY):
            return False
        season = league.season
        league.past_results[season.year] = season.results_by_week
        season.results_by_week = {}
        prune_active_memory(league)
        try:
            balance = apply_competitive_balance(league, self._rng, self.collaborators)
            _log.info(
                f"Competitive balance: {len(balance['fatigued'])} veterans tired, {len(balance['boosted'])} youngsters grew."
            )
        except Exception:
            _log.exception(f"Competitive balance failed after {season.year}.")
        season.year += 1
        season.week = 1
        season.last_simulated_week = 0
        season.playoff_winner = None
        season.playoff_teams = set()
        season.offseason = False
        league.pending_event = None

        for team in league.teams:
            team.record = TeamRecord()
            team.game_plan.reset()
            team.stats.game = {}
            team.stats.season = {}
            for player in team.roster:
                player.stats.game = {}
                player.stats.season = {}
                player.season_ovr_start = player.overall
                player.season_news.clear()

        try:
            league.schedule = self.collaborators.generate_schedule(league.teams)
        except Exception:
            _log.exception(f"Schedule generation failed for {season.year}; keeping the previous schedule.")
        _log.info(f"Season {season.year} ready with a {len(league.schedule)}-week schedule.")
        return True

    def start_new_season(self) -> bool:
        return bool(self._run(self._start_new_season))
