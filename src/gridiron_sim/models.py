from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4

from .config import STATUS_DECAY_CHANCE, WEEKS_PER_SEASON_YEAR

POSITIONS = ("QB", "RB", "WR", "TE", "OL", "DL", "LB", "CB", "S", "K", "P")
OFFENSE_POSITIONS = {"QB", "RB", "WR", "TE", "OL"}
DEFENSE_POSITIONS = {"DL", "LB", "CB", "S"}
SPECIAL_TEAMS_POSITIONS = {"K", "P"}


class DevelopmentStatus(str, Enum):
    """Career trajectory tag. Non-normal tags block re-triggering until they decay."""

    NORMAL = "NORMAL"
    BREAKOUT = "BREAKOUT"
    LEAP = "LEAP"
    SECOND_WIND = "SECOND_WIND"
    STAGNATED = "STAGNATED"
    DECLINING = "DECLINING"

    @property
    def decay_chance(self) -> float:
        # DECLINING has no entry and never decays back to NORMAL.
        return STATUS_DECAY_CHANCE.get(self.value, 0.0)


class SeasonPhase(str, Enum):
    REGULAR_SEASON = "REGULAR_SEASON"
    PLAYOFFS_PENDING = "PLAYOFFS_PENDING"
    OFFSEASON = "OFFSEASON"
    NEW_SEASON_READY = "NEW_SEASON_READY"


@dataclass(slots=True)
class Injury:
    name: str
    weeks_out: int
    impact: float = 0.0

    @property
    def active(self) -> bool:
        return self.weeks_out > 0


@dataclass(slots=True)
class StatBuckets:
    game: dict[str, float] = field(default_factory=dict)
    season: dict[str, float] = field(default_factory=dict)
    career: dict[str, float] = field(default_factory=dict)
    history: list[dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class Player:
    name: str
    position: str
    age: int = 24
    overall: int = 60
    potential: int = 70
    ratings: dict[str, int] = field(default_factory=dict)
    player_id: str = field(default_factory=lambda: uuid4().hex)
    development_status: DevelopmentStatus = DevelopmentStatus.NORMAL
    stats: StatBuckets = field(default_factory=StatBuckets)
    injuries: list[Injury] = field(default_factory=list)
    season_ovr_start: int | None = None
    xp: int = 0
    years_with_team: int = 1
    boom_factor: float = 0.0
    bust_factor: float = 0.0
    season_news: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.season_ovr_start is None:
            self.season_ovr_start = self.overall

    @property
    def is_injured(self) -> bool:
        return any(injury.active for injury in self.injuries)

    @property
    def weeks_with_team(self) -> int:
        return self.years_with_team * WEEKS_PER_SEASON_YEAR

    @property
    def ovr_delta(self) -> int:
        return self.overall - int(self.season_ovr_start or self.overall)

    def rating(self, key: str, default: int = 70) -> int:
        return int(self.ratings.get(key, default))

    def tick_injuries(self) -> None:
        for injury in self.injuries:
            if injury.weeks_out > 0:
                injury.weeks_out -= 1
        self.injuries = [injury for injury in self.injuries if injury.active]


@dataclass(slots=True)
class Coach:
    name: str
    role: str = "HC"
    development: int = 50
    perk: str | None = None


@dataclass(slots=True)
class CoachingStaff:
    head_coach: Coach | None = None
    off_coordinator: Coach | None = None
    def_coordinator: Coach | None = None

    def members(self) -> list[Coach | None]:
        return [self.head_coach, self.off_coordinator, self.def_coordinator]


@dataclass(slots=True)
class GamePlan:
    offense: str = "BALANCED"
    defense: str = "BALANCED"
    risk: str = "BALANCED"

    def reset(self) -> None:
        self.offense = "BALANCED"
        self.defense = "BALANCED"
        self.risk = "BALANCED"


@dataclass(slots=True)
class TeamRecord:
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: int = 0
    points_against: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def point_diff(self) -> int:
        return self.points_for - self.points_against

    @property
    def win_pct(self) -> float:
        gp = self.games_played
        if gp <= 0:
            return 0.0
        return (self.wins + self.ties * 0.5) / gp

    def register_game(self, points_for: int, points_against: int) -> None:
        self.points_for += points_for
        self.points_against += points_against
        if points_for > points_against:
            self.wins += 1
        elif points_for < points_against:
            self.losses += 1
        else:
            self.ties += 1


@dataclass(slots=True)
class TeamLegacy:
    playoff_streak: int = 0
    championships: list[int] = field(default_factory=list)
    best_season: dict[str, Any] | None = None


@dataclass(slots=True)
class Team:
    team_id: int
    name: str
    abbr: str = ""
    roster: list[Player] = field(default_factory=list)
    record: TeamRecord = field(default_factory=TeamRecord)
    staff: CoachingStaff = field(default_factory=CoachingStaff)
    game_plan: GamePlan = field(default_factory=GamePlan)
    stats: StatBuckets = field(default_factory=StatBuckets)
    cap_rollover: float = 0.0
    legacy: TeamLegacy = field(default_factory=TeamLegacy)

    def __post_init__(self) -> None:
        if not self.abbr:
            self.abbr = self.name[:3].upper()

    def players_at(self, position: str) -> list[Player]:
        return [p for p in self.roster if p.position == position]

    def find_player(self, player_id: str) -> Player | None:
        for player in self.roster:
            if player.player_id == player_id:
                return player
        return None


@dataclass(slots=True, frozen=True)
class Pairing:
    home: int | None = None
    away: int | None = None
    bye: tuple[int, ...] = ()

    @property
    def is_bye(self) -> bool:
        return bool(self.bye) and self.home is None and self.away is None


@dataclass(slots=True)
class Week:
    games: list[Pairing] = field(default_factory=list)


@dataclass(slots=True)
class Schedule:
    weeks: list[Week] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.weeks)

    def week(self, number: int) -> Week:
        """Return the 1-based week ``number``."""
        if number < 1 or number > len(self.weeks):
            raise IndexError(f"Week {number} outside schedule of {len(self.weeks)} weeks.")
        return self.weeks[number - 1]


@dataclass(slots=True, frozen=True)
class GameResult:
    id: str
    week: int
    year: int
    home: int | None = None
    away: int | None = None
    home_name: str = ""
    away_name: str = ""
    score_home: int = 0
    score_away: int = 0
    box_score: dict[str, dict[str, Any]] = field(default_factory=dict)
    bye: tuple[int, ...] = ()

    @property
    def home_win(self) -> bool:
        return self.score_home > self.score_away

    @property
    def is_bye(self) -> bool:
        return bool(self.bye)

    def to_dict(self) -> dict[str, Any]:
        if self.is_bye:
            return {"id": self.id, "week": self.week, "year": self.year, "bye": list(self.bye)}
        return {
            "id": self.id,
            "home": self.home,
            "away": self.away,
            "homeName": self.home_name,
            "awayName": self.away_name,
            "scoreHome": self.score_home,
            "scoreAway": self.score_away,
            "homeWin": self.home_win,
            "week": self.week,
            "year": self.year,
            "boxScore": {
                "home": self.box_score.get("home", {}),
                "away": self.box_score.get("away", {}),
            },
        }


@dataclass(slots=True)
class NewsItem:
    headline: str
    story: str = ""
    kind: str = "general"
    year: int = 0
    week: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "headline": self.headline,
            "story": self.story,
            "type": self.kind,
            "year": self.year,
            "week": self.week,
        }


@dataclass(slots=True)
class SeasonState:
    year: int
    week: int = 1
    offseason: bool = False
    phase: SeasonPhase = SeasonPhase.REGULAR_SEASON
    results_by_week: dict[int, list[GameResult]] = field(default_factory=dict)
    playoff_winner: int | None = None
    last_simulated_week: int = 0
    playoff_teams: set[int] = field(default_factory=set)
