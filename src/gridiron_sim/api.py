from __future__ import annotations

import os
from threading import Lock
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .app import build_default_league
from .development import TrainingSettings
from .league import LeagueSimulator
from .models import Player, Team


class OverrideResult(BaseModel):
    home: int
    away: int
    score_home: int
    score_away: int


class AdvanceSelection(BaseModel):
    override_results: list[OverrideResult] = []


class SeasonRunSelection(BaseModel):
    max_weeks: int | None = None


class PlayoffWinnerSelection(BaseModel):
    team_id: int


class PlayoffFieldSelection(BaseModel):
    team_ids: list[int]


class TrainingSelection(BaseModel):
    intensity: str = "NORMAL"
    focus: str = "BALANCED"


def _player_payload(player: Player, team: Team) -> dict[str, Any]:
    return {
        "player_id": player.player_id,
        "name": player.name,
        "team": team.abbr,
        "position": player.position,
        "age": player.age,
        "overall": player.overall,
        "potential": player.potential,
        "ovr_delta": player.ovr_delta,
        "development_status": player.development_status.value,
        "ratings": dict(player.ratings),
        "injured": player.is_injured,
        "season": dict(player.stats.season),
        "career": dict(player.stats.career),
        "news": list(player.season_news),
    }


class SimService:
    def __init__(self, seed: int | None = None, team_count: int | None = None) -> None:
        self.seed = seed if seed is not None else int(os.environ.get("GRIDIRON_SIM_SEED", "7"))
        self.team_count = team_count or int(os.environ.get("GRIDIRON_SIM_TEAMS", "8"))
        self._init_fresh_state()
        self._lock = Lock()

    def _init_fresh_state(self) -> None:
        league = build_default_league(count=self.team_count, seed=self.seed)
        self.simulator = LeagueSimulator(league, seed=self.seed)

    def meta(self) -> dict[str, Any]:
        league = self.simulator.league
        return {
            "year": league.season.year,
            "week": league.season.week,
            "phase": league.season.phase.value,
            "offseason": league.season.offseason,
            "schedule_weeks": len(league.schedule),
            "playoff_winner": league.season.playoff_winner,
            "pending_event": league.pending_event,
            "training": {"intensity": league.training.intensity, "focus": league.training.focus},
        }

    def standings(self) -> list[dict[str, Any]]:
        rows = []
        for team in self.simulator.league.standings():
            rec = team.record
            rows.append(
                {
                    "team_id": team.team_id,
                    "team": team.name,
                    "abbr": team.abbr,
                    "wins": rec.wins,
                    "losses": rec.losses,
                    "ties": rec.ties,
                    "points_for": rec.points_for,
                    "points_against": rec.points_against,
                    "win_pct": round(rec.win_pct, 3),
                }
            )
        return rows

    def advance(self, overrides: list[OverrideResult] | None = None) -> dict[str, Any]:
        mapping = {(o.home, o.away): (o.score_home, o.score_away) for o in overrides or []}
        outcome = self.simulator.simulate_week(override_results=mapping or None)
        payload = outcome.to_dict()
        if outcome.rollover is not None:
            payload["retirements"] = list(outcome.rollover.announcements)
        payload["meta"] = self.meta()
        return payload

    def run_season(self, max_weeks: int | None) -> dict[str, Any]:
        report = self.simulator.simulate_season(max_weeks=max_weeks)
        return {
            "weeks_simulated": report.weeks_simulated,
            "paused": report.paused,
            "statuses": [outcome.status for outcome in report.outcomes],
            "meta": self.meta(),
        }

    def week_results(self, week: int) -> list[dict[str, Any]]:
        results = self.simulator.league.season.results_by_week.get(week - 1)
        if results is None:
            raise HTTPException(status_code=404, detail=f"No results stored for week {week}")
        return [result.to_dict() for result in results]

    def news(self, limit: int) -> list[dict[str, Any]]:
        items = self.simulator.league.news[-max(0, limit):] if limit else []
        return [item.to_dict() for item in reversed(items)]

    def player(self, player_id: str) -> dict[str, Any]:
        for team in self.simulator.league.teams:
            found = team.find_player(player_id)
            if found is not None:
                return _player_payload(found, team)
        raise HTTPException(status_code=404, detail="Player not found")

    def reset(self) -> dict[str, Any]:
        self._init_fresh_state()
        return {"ok": True, "meta": self.meta()}


service = SimService()
app = FastAPI(title="Gridiron Sim API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/meta")
def meta() -> dict[str, Any]:
    with service._lock:
        return service.meta()


@app.get("/api/standings")
def standings() -> list[dict[str, Any]]:
    with service._lock:
        return service.standings()


@app.get("/api/results/{week}")
def results(week: int) -> list[dict[str, Any]]:
    with service._lock:
        return service.week_results(week)


@app.get("/api/news")
def news(limit: int = 50) -> list[dict[str, Any]]:
    with service._lock:
        return service.news(limit)


@app.get("/api/players/{player_id}")
def player(player_id: str) -> dict[str, Any]:
    with service._lock:
        return service.player(player_id)


@app.post("/api/advance")
def advance(payload: AdvanceSelection | None = None) -> dict[str, Any]:
    with service._lock:
        return service.advance(payload.override_results if payload else None)


@app.post("/api/season/run")
def run_season(payload: SeasonRunSelection) -> dict[str, Any]:
    with service._lock:
        return service.run_season(payload.max_weeks)


@app.post("/api/playoffs/winner")
def playoff_winner(payload: PlayoffWinnerSelection) -> dict[str, Any]:
    with service._lock:
        try:
            accepted = service.simulator.record_playoff_winner(payload.team_id)
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        if not accepted:
            raise HTTPException(status_code=409, detail="Regular season is not complete")
        return {"ok": True, "meta": service.meta()}


@app.post("/api/playoffs/field")
def playoff_field(payload: PlayoffFieldSelection) -> dict[str, Any]:
    with service._lock:
        try:
            accepted = service.simulator.record_playoff_teams(payload.team_ids)
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        if not accepted:
            raise HTTPException(status_code=409, detail="Regular season is not complete")
        return {"ok": True, "meta": service.meta()}


@app.post("/api/offseason")
def offseason() -> dict[str, Any]:
    with service._lock:
        report = service.simulator.start_offseason()
        if report is None:
            return {"ok": False, "detail": "Already in offseason or season not finished", "meta": service.meta()}
        return {
            "ok": True,
            "retired": report.retired,
            "announcements": report.announcements,
            "failures": report.failures,
            "meta": service.meta(),
        }


@app.post("/api/new-season")
def new_season() -> dict[str, Any]:
    with service._lock:
        started = service.simulator.start_new_season()
        return {"ok": started, "meta": service.meta()}


@app.post("/api/training")
def set_training(payload: TrainingSelection) -> dict[str, Any]:
    with service._lock:
        try:
            settings = TrainingSettings(intensity=payload.intensity, focus=payload.focus)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        service.simulator.league.training = settings
        return {"ok": True, "meta": service.meta()}


@app.post("/api/events/resolve")
def resolve_event() -> dict[str, Any]:
    with service._lock:
        event = service.simulator.resolve_pending_event()
        return {"ok": event is not None, "event": event}


@app.post("/api/reset")
def reset() -> dict[str, Any]:
    with service._lock:
        return service.reset()
