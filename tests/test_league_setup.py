import random

from gridiron_sim.app import build_default_league, build_default_teams, format_leaders, format_standings
from gridiron_sim.config import ROSTER_TEMPLATE
from gridiron_sim.league import simulate_week
from gridiron_sim.models import SeasonPhase


def test_team_count_and_ids_match_indices() -> None:
    teams = build_default_teams()
    assert len(teams) == 8
    assert [team.team_id for team in teams] == list(range(8))
    assert len({team.abbr for team in teams}) == 8


def test_roster_follows_template() -> None:
    for team in build_default_teams(count=4):
        assert len(team.roster) == sum(ROSTER_TEMPLATE.values())
        for position, count in ROSTER_TEMPLATE.items():
            assert len(team.players_at(position)) == count


def test_player_names_are_league_unique() -> None:
    teams = build_default_teams()
    names = [player.name for team in teams for player in team.roster]
    assert len(names) == len(set(names))


def test_generated_ratings_are_in_range() -> None:
    for team in build_default_teams():
        for player in team.roster:
            assert 0 <= player.overall <= 99
            assert player.overall <= player.potential <= 99
            assert player.season_ovr_start == player.overall
            assert all(0 <= value <= 99 for value in player.ratings.values())


def test_same_seed_builds_same_league() -> None:
    first = build_default_teams(seed=11)
    second = build_default_teams(seed=11)
    assert [p.overall for t in first for p in t.roster] == [p.overall for t in second for p in t.roster]


def test_default_league_starts_in_week_one() -> None:
    league = build_default_league(count=4, games_per_matchup=1)
    assert league.week == 1
    assert league.season.phase is SeasonPhase.REGULAR_SEASON
    assert not league.season.offseason
    assert len(league.schedule) == 3
    assert "Pos Team" in format_standings(league)


def test_leaders_table_lists_passers_after_a_week() -> None:
    league = build_default_league(count=4, seed=2, games_per_matchup=1)
    simulate_week(league, rng=random.Random(2))
    table = format_leaders(league, "passYd", limit=3).splitlines()
    assert table[0] == "passYd leaders"
    assert 1 < len(table) <= 5
    assert all(" QB " in row for row in table[2:])
