import random

import pytest

from gridiron_sim.collaborators import Collaborators
from gridiron_sim.development import (
    TrainingSettings,
    age_factor,
    apply_regression,
    coaching_bonus,
    performance_bonus,
    potential_factor,
    run_weekly_development,
)
from gridiron_sim.league import League
from gridiron_sim.models import (
    Coach,
    CoachingStaff,
    DevelopmentStatus,
    Injury,
    Player,
    Schedule,
    SeasonState,
    Team,
)


class AlwaysZero(random.Random):
    """Every probability roll succeeds; integer draws stay random."""

    def random(self) -> float:
        return 0.0


RB_RATINGS = {"speed": 80, "acceleration": 78, "agility": 76, "trucking": 70, "carrying": 72,
              "juking": 70, "awareness": 65, "intelligence": 60}


def _league_with(player: Player, staff: CoachingStaff | None = None, **training) -> League:
    team = Team(team_id=0, name="Dev Club", roster=[player], staff=staff or CoachingStaff())
    league = League(teams=[team], schedule=Schedule(weeks=[]), season=SeasonState(year=2025))
    if training:
        league.training = TrainingSettings(**training)
    return league


def test_age_factor_regimes() -> None:
    assert age_factor("RB", 20) == pytest.approx(1.5)
    assert age_factor("RB", 22) == pytest.approx(1.3)
    assert age_factor("RB", 25) == 1.0
    assert age_factor("RB", 30) == pytest.approx(0.5)
    assert age_factor("RB", 31) == pytest.approx(0.35)
    assert age_factor("RB", 40) == pytest.approx(0.1)


def test_potential_factor_by_gap() -> None:
    assert potential_factor(Player(name="A", position="WR", overall=60, potential=80)) == 1.4
    assert potential_factor(Player(name="B", position="WR", overall=60, potential=72)) == 1.2
    assert potential_factor(Player(name="C", position="WR", overall=60, potential=67)) == 1.1
    assert potential_factor(Player(name="D", position="WR", overall=60, potential=63)) == 1.0
    assert potential_factor(Player(name="E", position="WR", overall=70, potential=70)) == 0.3


def test_coaching_bonus() -> None:
    staff = CoachingStaff(
        head_coach=Coach(name="H", development=70),
        off_coordinator=Coach(name="O", role="OC", development=70),
        def_coordinator=Coach(name="D", role="DC", development=70),
    )
    assert coaching_bonus(Team(team_id=0, name="Coached", staff=staff)) == 10
    assert coaching_bonus(Team(team_id=1, name="Vacant")) == 0


def test_performance_bonus_is_capped() -> None:
    qb = Player(name="Gunslinger", position="QB")
    qb.stats.game = {"passTD": 5, "passYd": 420, "interceptions": 0, "passAtt": 38}
    assert performance_bonus(qb) == 40
    assert performance_bonus(Player(name="Benched", position="QB")) == 0


def test_capped_player_never_breaks_out_and_xp_is_positive() -> None:
    awarded: list[int] = []

    def recording_add_xp(player: Player, amount: int) -> None:
        awarded.append(amount)

    player = Player(name="Finished Product", position="RB", age=22, overall=70, potential=70,
                    ratings=dict(RB_RATINGS), boom_factor=9.0)
    league = _league_with(player)
    collaborators = Collaborators(add_xp=recording_add_xp)
    for _ in range(20):
        report = run_weekly_development(league, collaborators, AlwaysZero(1))
        assert (player.player_id, DevelopmentStatus.BREAKOUT) not in report.events
    assert player.development_status is not DevelopmentStatus.BREAKOUT
    assert awarded and all(amount > 0 for amount in awarded)


def test_forced_breakout() -> None:
    player = Player(name="Rising Back", position="RB", age=23, overall=60, potential=80,
                    ratings=dict(RB_RATINGS))
    league = _league_with(player)
    report = run_weekly_development(league, Collaborators(), AlwaysZero(2))
    assert report.events == [(player.player_id, DevelopmentStatus.BREAKOUT)]
    assert player.development_status is DevelopmentStatus.BREAKOUT
    assert player.overall >= 62
    assert player.potential >= player.overall
    assert league.news[-1].headline == "BREAKOUT: Rising Back (DEV)"
    assert league.news[-1].kind == "development"
    assert player.season_news


def test_old_back_declines_and_regresses() -> None:
    player = Player(name="Old Legs", position="RB", age=36, overall=72, potential=75,
                    ratings=dict(RB_RATINGS))
    league = _league_with(player)
    speed_before = sum(player.ratings[key] for key in ("speed", "acceleration", "agility", "trucking", "juking"))
    report = run_weekly_development(league, Collaborators(), AlwaysZero(3))
    assert player.player_id in report.regressed
    assert (player.player_id, DevelopmentStatus.DECLINING) in report.events
    assert sum(player.ratings[key] for key in ("speed", "acceleration", "agility", "trucking", "juking")) < speed_before
    assert league.news[-1].headline.startswith("PHYSICAL DECLINE")


def test_regression_without_recalc_drops_one_point() -> None:
    player = Player(name="Veteran", position="RB", age=36, overall=70, potential=75,
                    ratings=dict(RB_RATINGS))
    assert apply_regression(player, AlwaysZero(4), Collaborators(recalc_overall=None))
    assert player.overall == 69


def test_young_player_does_not_regress() -> None:
    player = Player(name="Kid", position="RB", age=24, ratings=dict(RB_RATINGS))
    assert not apply_regression(player, AlwaysZero(5), Collaborators())
    assert player.ratings == RB_RATINGS


def test_heavy_training_injury_uses_hooks() -> None:
    applied: list[Injury] = []

    def make_injury(_player: Player, _rng: random.Random) -> Injury:
        return Injury(name="Hamstring strain", weeks_out=2, impact=0.2)

    def apply(player: Player, injury: Injury) -> None:
        applied.append(injury)
        player.injuries.append(injury)

    player = Player(name="Overworked", position="WR", age=27, overall=70, potential=72)
    league = _league_with(player, intensity="heavy")
    collaborators = Collaborators(generate_injury=make_injury, apply_injury=apply)
    report = run_weekly_development(league, collaborators, AlwaysZero(6))
    assert report.injured == [player.player_id]
    assert player.is_injured
    assert len(applied) == 1


def test_training_injury_skipped_without_hooks() -> None:
    player = Player(name="Lucky", position="WR", age=27, overall=70, potential=72)
    league = _league_with(player, intensity="HEAVY")
    report = run_weekly_development(league, Collaborators(), AlwaysZero(7))
    assert report.injured == []
    assert not player.is_injured


def test_normal_training_never_injures() -> None:
    calls: list[Player] = []

    def make_injury(player: Player, _rng: random.Random) -> Injury:
        calls.append(player)
        return Injury(name="Sprain", weeks_out=1)

    player = Player(name="Careful", position="WR", age=27)
    league = _league_with(player)
    run_weekly_development(league, Collaborators(generate_injury=make_injury, apply_injury=lambda p, i: None),
                           AlwaysZero(8))
    assert calls == []


def test_training_settings_validation() -> None:
    settings = TrainingSettings(intensity="low", focus="offense")
    assert (settings.intensity, settings.focus) == ("LOW", "OFFENSE")
    with pytest.raises(ValueError):
        TrainingSettings(intensity="BRUTAL")
    with pytest.raises(ValueError):
        TrainingSettings(focus="SPECIAL")


def test_heavy_training_earns_more_xp() -> None:
    def weekly(intensity: str) -> int:
        player = Player(name="Trainee", position="LB", age=24, overall=60, potential=75)
        league = _league_with(player, intensity=intensity)
        report = run_weekly_development(league, Collaborators(), random.Random(9))
        return report.xp_awarded[player.player_id]

    assert weekly("HEAVY") > weekly("NORMAL") > weekly("LOW")
