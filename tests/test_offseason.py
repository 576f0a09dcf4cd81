import random

from gridiron_sim.collaborators import Collaborators
from gridiron_sim.league import League
from gridiron_sim.models import GameResult, Player, Schedule, SeasonState, Team
from gridiron_sim.offseason import (
    apply_competitive_balance,
    accumulate_career_stats,
    prune_active_memory,
    calculate_all_awards,
    process_retirements,
    retirement_announcement,
    run_season_rollover,
    update_all_records,
    update_team_legacy,
)


def _league(*rosters: list[Player]) -> League:
    teams = [
        Team(team_id=idx, name=name, roster=roster)
        for idx, (name, roster) in enumerate(zip(("Harbor Kings", "Prairie Storm"), rosters))
    ]
    return League(teams=teams, schedule=Schedule(weeks=[]), season=SeasonState(year=2031))


def test_old_passer_retires_with_career_line() -> None:
    veteran = Player(name="Iron Arm", position="QB", age=45)
    veteran.stats.career = {"passYd": 70000, "passTD": 480}
    veteran.stats.history = [{"year": 2010 + i} for i in range(22)]
    rookie = Player(name="Fresh Face", position="QB", age=22)
    league = _league([veteran, rookie])

    report = process_retirements(league, 2031, random.Random(1))

    assert report.retired == [veteran]
    assert league.teams[0].roster == [rookie]
    assert "70,000 passing yards" in report.announcements[0]
    assert report.announcements[0].startswith("Iron Arm (QB, HAR) retires at 45 after 22 seasons")
    assert league.retired_players[0]["player_id"] == veteran.player_id
    assert league.retired_players[0]["career"]["passYd"] == 70000


def test_young_players_never_retire() -> None:
    roster = [Player(name=f"Young {idx}", position="WR", age=25 + idx % 7) for idx in range(30)]
    league = _league(roster)
    report = process_retirements(league, 2031, random.Random(2))
    assert report.retired == []
    assert len(league.teams[0].roster) == 30


def test_announcement_without_stats() -> None:
    kicker = Player(name="Quiet Leg", position="K", age=38)
    team = Team(team_id=0, name="Harbor Kings")
    assert retirement_announcement(kicker, team, 38) == "Quiet Leg (K, HAR) retires at 38 after 1 seasons."


def test_career_accumulation() -> None:
    runner = Player(name="Workhorse", position="RB", age=27)
    runner.stats.career = {"rushAtt": 200, "rushYd": 900, "longestRush": 61, "yardsPerCarry": 4.5}
    runner.stats.season = {"rushAtt": 100, "rushYd": 600, "longestRush": 44, "yardsPerCarry": 6.0}
    idle = Player(name="Bench", position="RB", age=27)
    league = _league([runner, idle])

    accumulate_career_stats(league)

    career = runner.stats.career
    assert career["rushAtt"] == 300
    assert career["rushYd"] == 1500
    assert career["longestRush"] == 61
    assert career["yardsPerCarry"] == 5.0
    assert runner.stats.history[-1]["year"] == 2031
    assert runner.stats.history[-1]["team"] == "HAR"
    assert runner.stats.history[-1]["stats"]["rushYd"] == 600
    assert idle.stats.history == []


def test_awards_and_records() -> None:
    star = Player(name="Star Passer", position="QB")
    star.stats.season = {"passYd": 4800, "passTD": 40}
    backup = Player(name="Backup Passer", position="QB")
    backup.stats.season = {"passYd": 900, "passTD": 4}
    rusher = Player(name="Fast Feet", position="RB")
    rusher.stats.season = {"rushYd": 1400}
    league = _league([star, rusher], [backup])

    awards = calculate_all_awards(league, 2031)
    assert awards["Passing Leader"]["name"] == "Star Passer"
    assert awards["Rushing Leader"]["value"] == 1400
    assert "Sack Leader" not in awards
    assert league.awards[2031] == awards

    update_all_records(league, 2031)
    assert league.records["passYd"] == {"value": 4800, "name": "Star Passer", "team": "HAR", "year": 2031}
    star.stats.season["passYd"] = 3000
    update_all_records(league, 2032)
    assert league.records["passYd"]["value"] == 4800


def test_rollover_isolates_failing_cap_hook() -> None:
    def cap_rollover(team: Team) -> None:
        if team.team_id == 1:
            raise RuntimeError("cap ledger missing")
        team.cap_rollover += 5

    veteran = Player(name="Old Timer", position="LB", age=40)
    starter = Player(name="Prime Age", position="LB", age=27, years_with_team=3)
    league = _league([veteran, starter], [Player(name="Other", position="CB", age=24)])

    report = run_season_rollover(league, Collaborators(process_cap_rollover=cap_rollover))

    assert report.failures == ["cap_rollover:PRA"]
    assert league.teams[0].cap_rollover == 5
    assert report.retired == [veteran.player_id]
    assert starter.age == 28
    assert starter.years_with_team == 4
    assert [item.kind for item in league.news] == ["retirement"]


class AlwaysZero(random.Random):
    def random(self) -> float:
        return 0.0


def _balance_league() -> League:
    teams = []
    for idx, wins in enumerate((12, 9, 6, 2)):
        roster = [
            Player(name=f"Vet {idx}", position="WR", age=31, overall=80, potential=82,
                   ratings={"speed": 88, "acceleration": 86, "agility": 84, "stamina": 85,
                            "catching": 80, "catchInTraffic": 78}),
            Player(name=f"Kid {idx}", position="QB", age=22, overall=60, potential=75,
                   ratings={"awareness": 60, "intelligence": 62, "throwPower": 70, "throwAccuracy": 65}),
        ]
        team = Team(team_id=idx, name=f"Club {idx}", roster=roster, cap_rollover=5.0)
        team.record.wins = wins
        teams.append(team)
    return League(teams=teams, schedule=Schedule(weeks=[]), season=SeasonState(year=2031))


def test_competitive_balance_hits_top_and_bottom_only() -> None:
    league = _balance_league()
    before = {p.player_id: dict(p.ratings) for team in league.teams for p in team.roster}

    changed = apply_competitive_balance(league, AlwaysZero(3))

    top, second, third, bottom = league.teams
    # Ranks 0 and 1 of four both sit in the top quarter.
    assert changed["fatigued"] == [top.roster[0].player_id, second.roster[0].player_id]
    assert changed["boosted"] == [bottom.roster[1].player_id]
    assert sum(top.roster[0].ratings.values()) == sum(before[top.roster[0].player_id].values()) - 1
    assert sum(bottom.roster[1].ratings.values()) > sum(before[bottom.roster[1].player_id].values())
    assert top.cap_rollover < 5.0
    assert bottom.cap_rollover == 5.0
    for player in third.roster + [top.roster[1], bottom.roster[0]]:
        assert player.ratings == before[player.player_id]
    assert bottom.roster[1].overall <= bottom.roster[1].potential


def test_prune_active_memory() -> None:
    league = _league([Player(name="Long Career", position="S", age=30)])
    league.teams[0].roster[0].stats.history = [{"year": 2020 + idx} for idx in range(8)]
    league.retired_players = [{"name": f"Old {idx}", "year": 2000 + idx} for idx in range(60)]
    league.past_results[2030] = {
        0: [
            GameResult(id="2030-1-0", week=1, year=2030, home=0, away=1, score_home=21, score_away=14,
                       box_score={"home": {"p1": {"name": "X", "pos": "QB", "stats": {}}}, "away": {}}),
            GameResult(id="2030-1-1", week=1, year=2030, bye=(2,)),
        ]
    }

    prune_active_memory(league)

    archived = league.past_results[2030][0]
    assert archived[0].box_score == {}
    assert (archived[0].score_home, archived[0].score_away) == (21, 14)
    assert archived[1].is_bye
    assert len(league.retired_players) == 50
    assert league.retired_players[-1]["name"] == "Old 59"
    assert [entry["year"] for entry in league.teams[0].roster[0].stats.history] == [2023, 2024, 2025, 2026, 2027]


def test_team_legacy_streaks_and_best_season() -> None:
    league = _league([], [])
    first, second = league.teams
    first.record.wins, first.record.points_for, first.record.points_against = 10, 300, 200
    second.record.wins = 4
    league.season.playoff_winner = 0
    update_team_legacy(league)

    assert first.legacy.championships == [2031]
    assert first.legacy.playoff_streak == 1
    assert second.legacy.playoff_streak == 0
    assert first.legacy.best_season["score"] == 110.0

    league.season.year = 2032
    league.season.playoff_winner = None
    first.record.wins = 6
    update_team_legacy(league)
    assert first.legacy.playoff_streak == 0
    assert first.legacy.best_season["year"] == 2031
