import random

import pytest

from gridiron_sim.app import build_default_league
from gridiron_sim.collaborators import Collaborators
from gridiron_sim.errors import ConfigurationError
from gridiron_sim.development import performance_bonus
from gridiron_sim.league import League, simulate_week
from gridiron_sim.models import Pairing, Player, Schedule, SeasonState, Team, Week
from gridiron_sim.schedule import build_season_schedule
from gridiron_sim.stats import additive_fields


def _qb(name: str) -> Player:
    return Player(
        name=name,
        position="QB",
        overall=80,
        potential=85,
        ratings={"throwPower": 80, "throwAccuracy": 80, "awareness": 80},
    )


def _two_team_league(games: list[Pairing]) -> League:
    teams = [
        Team(team_id=0, name="Home Club", roster=[_qb("Home Passer")]),
        Team(team_id=1, name="Road Club", roster=[_qb("Road Passer")]),
    ]
    return League(teams=teams, schedule=Schedule(weeks=[Week(games=games)]), season=SeasonState(year=2025))


def test_two_team_week_produces_one_result() -> None:
    league = _two_team_league([Pairing(home=0, away=1)])
    outcome = simulate_week(league, rng=random.Random(1))
    assert outcome.games_simulated == 1
    played = [result for result in outcome.results if not result.is_bye]
    assert len(played) == 1
    assert played[0].score_home >= 0
    assert played[0].score_away >= 0
    assert league.week == 2
    assert league.season.results_by_week[0] == outcome.results


def test_bye_pairing_is_recorded_but_not_counted() -> None:
    league = _two_team_league([Pairing(home=0, away=1), Pairing(bye=(3,))])
    outcome = simulate_week(league, rng=random.Random(2))
    assert outcome.games_simulated == 1
    byes = [result for result in outcome.results if result.is_bye]
    assert len(byes) == 1
    assert byes[0].bye == (3,)
    assert byes[0].to_dict()["bye"] == [3]


def test_override_results_bypass_simulation() -> None:
    league = _two_team_league([Pairing(home=0, away=1)])
    outcome = simulate_week(league, rng=random.Random(3), override_results={(0, 1): (31, 17)})
    result = outcome.results[0]
    assert (result.score_home, result.score_away) == (31, 17)
    assert result.home_win
    assert result.box_score == {"home": {}, "away": {}}
    home, away = league.teams
    assert (home.record.wins, home.record.points_for) == (1, 31)
    assert (away.record.losses, away.record.points_against) == (1, 31)
    assert all(player.stats.season == {} for player in home.roster)


def test_result_dict_matches_external_shape() -> None:
    league = _two_team_league([Pairing(home=0, away=1)])
    payload = simulate_week(league, rng=random.Random(4)).results[0].to_dict()
    for key in ("id", "home", "away", "scoreHome", "scoreAway", "homeWin", "week", "year", "boxScore"):
        assert key in payload
    assert set(payload["boxScore"]) == {"home", "away"}


def test_records_grow_by_games_simulated() -> None:
    league = build_default_league(count=6, seed=9, games_per_matchup=1)
    for _ in range(len(league.schedule)):
        before = {team.team_id: team.record.games_played for team in league.teams}
        outcome = simulate_week(league, rng=random.Random(league.week))
        after = {team.team_id: team.record.games_played for team in league.teams}
        assert sum(after.values()) - sum(before.values()) == 2 * outcome.games_simulated
        assert all(0 <= after[tid] - before[tid] <= 1 for tid in after)
        for result in outcome.results:
            assert result.score_home >= 0 and result.score_away >= 0


def test_box_score_matches_season_totals_after_first_week() -> None:
    league = build_default_league(count=4, seed=12, games_per_matchup=1)
    outcome = simulate_week(league, rng=random.Random(7))
    for result in outcome.results:
        for side, team_idx in (("home", result.home), ("away", result.away)):
            team = league.teams[team_idx]
            for player_id, row in result.box_score[side].items():
                player = team.find_player(player_id)
                assert player is not None
                for key, value in additive_fields(row["stats"]).items():
                    assert player.stats.season[key] == value


def test_repeat_call_for_same_week_is_ignored() -> None:
    league = _two_team_league([Pairing(home=0, away=1)])
    simulate_week(league, rng=random.Random(5))
    records = [team.record.games_played for team in league.teams]
    league.season.week = 1
    outcome = simulate_week(league, rng=random.Random(5))
    assert outcome.status == "duplicate"
    assert outcome.games_simulated == 0
    assert [team.record.games_played for team in league.teams] == records


def test_unknown_team_index_is_skipped() -> None:
    league = _two_team_league([Pairing(home=0, away=7), Pairing(home=0, away=1)])
    outcome = simulate_week(league, rng=random.Random(6))
    assert outcome.games_simulated == 1
    assert league.week == 2


def test_same_seed_gives_same_week() -> None:
    scores = []
    for _ in range(2):
        league = build_default_league(count=8, seed=3, games_per_matchup=1)
        outcome = simulate_week(league, rng=random.Random(11))
        scores.append([(r.score_home, r.score_away) for r in outcome.results])
    assert scores[0] == scores[1]


def test_game_plans_reset_after_week() -> None:
    league = _two_team_league([Pairing(home=0, away=1)])
    league.teams[0].game_plan.offense = "AGGRESSIVE"
    simulate_week(league, rng=random.Random(8))
    assert league.teams[0].game_plan.offense == "BALANCED"


def test_missing_required_collaborator_aborts_before_any_change() -> None:
    league = _two_team_league([Pairing(home=0, away=1)])
    with pytest.raises(ConfigurationError):
        simulate_week(league, Collaborators(add_xp=None), rng=random.Random(9))
    assert league.week == 1
    assert league.season.results_by_week == {}
    assert all(team.record.games_played == 0 for team in league.teams)


def test_generated_schedule_plays_teams_with_arbitrary_ids() -> None:
    teams = [
        Team(team_id=10, name="Home Club", roster=[_qb("Home Passer")]),
        Team(team_id=20, name="Road Club", roster=[_qb("Road Passer")]),
    ]
    league = League(teams=teams, schedule=build_season_schedule(teams), season=SeasonState(year=2025))
    outcome = simulate_week(league, rng=random.Random(10))
    assert outcome.games_simulated == 1
    assert sum(team.record.games_played for team in teams) == 2


def test_override_week_clears_previous_game_lines() -> None:
    league = build_default_league(count=4, seed=14, games_per_matchup=1)
    simulate_week(league, rng=random.Random(1))
    assert any(player.stats.game for team in league.teams for player in team.roster)

    overrides = {(p.home, p.away): (20, 10) for p in league.schedule.week(2).games if not p.is_bye}
    outcome = simulate_week(league, rng=random.Random(2), override_results=overrides)
    assert outcome.games_simulated == 2
    for team in league.teams:
        assert team.stats.game == {}
        for player in team.roster:
            assert player.stats.game == {}
            assert performance_bonus(player) == 0
