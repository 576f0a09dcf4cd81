"""Static simulation configuration constants."""

# Game scoring.
HOME_ADVANTAGE = 2.5
BASE_SCORE_MIN = 7
BASE_SCORE_MAX = 24
SCORE_VARIANCE = 14
EMPTY_ROSTER_STRENGTH = 50.0
DEFAULT_DEFENSE_STRENGTH = 70.0
WEEKS_PER_SEASON_YEAR = 17

# Rating resolver.
MAX_INJURY_IMPACT = 0.85
MIN_EFFECTIVE_RATING = 40

# Usage shares for stacked position groups.
RB_USAGE_SHARES: tuple[float, ...] = (0.7, 0.3)
RECEIVER_TARGET_SHARE = 0.85
MAX_WIDE_RECEIVERS = 5
MAX_TIGHT_ENDS = 2
MAX_OFFENSIVE_LINE = 5

# Coordinator perks: multiplicative modifiers applied to stat generation.
OFFENSE_PERKS: dict[str, dict[str, float]] = {
    "Air Raid": {"pass_volume": 1.15, "run_volume": 0.85},
    "Ground & Pound": {"run_volume": 1.15, "pass_volume": 0.85},
    "Balanced": {"pass_accuracy": 1.05},
}
DEFENSE_PERKS: dict[str, dict[str, float]] = {
    "Blitz Happy": {"sack_chance": 1.2},
    "No Fly Zone": {"int_chance": 1.2},
}

# Weekly training.
BASE_XP = 50
XP_PER_OVERALL_POINT = 1000
TRAINING_INTENSITY: dict[str, dict[str, float]] = {
    "LOW": {"xp": 0.8, "injury_chance": 0.0},
    "NORMAL": {"xp": 1.0, "injury_chance": 0.0},
    "HEAVY": {"xp": 1.3, "injury_chance": 0.005},
}
TRAINING_FOCUS = ("BALANCED", "OFFENSE", "DEFENSE")
FOCUS_BONUS = 1.2
FOCUS_PENALTY = 0.9
PERFORMANCE_BONUS_CAP = 40
DEFAULT_COACH_DEVELOPMENT = 50

# (peak_start, peak_end, cliff_age, growth_rate)
AGE_CURVES: dict[str, tuple[int, int, int, float]] = {
    "QB": (27, 35, 38, 1.4),
    "RB": (23, 27, 30, 1.5),
    "WR": (25, 30, 33, 1.3),
    "TE": (26, 31, 34, 1.2),
    "OL": (26, 33, 36, 1.1),
    "DL": (25, 30, 33, 1.3),
    "LB": (25, 30, 33, 1.3),
    "CB": (24, 29, 32, 1.4),
    "S": (25, 31, 34, 1.2),
    "K": (26, 36, 42, 0.8),
    "P": (26, 36, 42, 0.8),
}

PHYSICAL_ATTRIBUTES = ("speed", "acceleration", "agility", "trucking", "juking")
MENTAL_ATTRIBUTES = ("awareness", "intelligence")
PHYSICAL_FLOOR = 35
MENTAL_FLOOR = 45

# Development events.
STATUS_DECAY_CHANCE: dict[str, float] = {
    "BREAKOUT": 0.12,
    "LEAP": 0.10,
    "SECOND_WIND": 0.10,
    "STAGNATED": 0.08,
}
BREAKOUT_BASE_CHANCE = 0.025
LEAP_CHANCE = 0.008
SECOND_WIND_CHANCE = 0.005
STAGNATION_BASE_CHANCE = 0.008
DECLINE_BASE_CHANCE = 0.015
DECLINE_PER_YEAR_OVER_PEAK = 0.008
DECLINE_PAST_CLIFF_BONUS = 0.10

EVENT_LABELS: dict[str, str] = {
    "BREAKOUT": "BREAKOUT",
    "LEAP": "CAREER LEAP",
    "SECOND_WIND": "VETERAN RESURGENCE",
    "STAGNATED": "DEVELOPMENT STALLED",
    "DECLINING": "PHYSICAL DECLINE",
}

# Overall rating weights per position.
OVR_WEIGHTS: dict[str, dict[str, float]] = {
    "QB": {"throwPower": 0.2, "throwAccuracy": 0.3, "awareness": 0.3, "speed": 0.1, "intelligence": 0.1},
    "RB": {"speed": 0.2, "acceleration": 0.2, "trucking": 0.15, "juking": 0.15, "catching": 0.1, "awareness": 0.2},
    "WR": {"speed": 0.3, "acceleration": 0.2, "catching": 0.3, "catchInTraffic": 0.2},
    "TE": {"speed": 0.15, "catching": 0.25, "catchInTraffic": 0.2, "runBlock": 0.2, "passBlock": 0.2},
    "OL": {"runBlock": 0.5, "passBlock": 0.5},
    "DL": {"passRushPower": 0.3, "passRushSpeed": 0.3, "runStop": 0.4},
    "LB": {"speed": 0.2, "runStop": 0.3, "coverage": 0.3, "awareness": 0.2},
    "CB": {"speed": 0.3, "acceleration": 0.2, "coverage": 0.4, "intelligence": 0.1},
    "S": {"speed": 0.25, "coverage": 0.3, "runStop": 0.25, "awareness": 0.2},
    "K": {"kickPower": 0.6, "kickAccuracy": 0.4},
    "P": {"kickPower": 0.6, "kickAccuracy": 0.4},
}

# Sub-attribute generation ranges per position.
POS_RATING_RANGES: dict[str, dict[str, tuple[int, int]]] = {
    "QB": {"throwPower": (60, 99), "throwAccuracy": (55, 99), "awareness": (50, 99), "speed": (40, 85), "intelligence": (60, 99)},
    "RB": {"speed": (70, 99), "acceleration": (70, 99), "trucking": (50, 99), "juking": (50, 99), "catching": (40, 90), "awareness": (50, 90)},
    "WR": {"speed": (70, 99), "acceleration": (70, 99), "catching": (65, 99), "catchInTraffic": (55, 99), "awareness": (50, 90)},
    "TE": {"catching": (55, 95), "catchInTraffic": (50, 90), "runBlock": (60, 95), "passBlock": (55, 90), "speed": (50, 85), "awareness": (50, 90)},
    "OL": {"runBlock": (70, 99), "passBlock": (70, 99), "awareness": (60, 95), "speed": (30, 65)},
    "DL": {"passRushPower": (60, 99), "passRushSpeed": (55, 99), "runStop": (65, 99), "awareness": (50, 90), "speed": (45, 85)},
    "LB": {"speed": (60, 95), "runStop": (60, 95), "coverage": (45, 90), "awareness": (55, 95), "passRushSpeed": (40, 85)},
    "CB": {"speed": (75, 99), "acceleration": (75, 99), "coverage": (60, 99), "intelligence": (50, 95), "awareness": (55, 90)},
    "S": {"speed": (65, 95), "coverage": (55, 95), "runStop": (50, 90), "awareness": (60, 95), "intelligence": (55, 90)},
    "K": {"kickPower": (70, 99), "kickAccuracy": (60, 99), "awareness": (50, 80)},
    "P": {"kickPower": (65, 99), "kickAccuracy": (60, 99), "awareness": (50, 80)},
}

# Attributes a targeted development boost may land on: (primary, secondary, tertiary).
POSITION_TRAINING_WEIGHTS: dict[str, tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]] = {
    "QB": (("throwPower", "throwAccuracy", "awareness"), ("speed", "intelligence"), ("agility",)),
    "RB": (("speed", "trucking", "juking"), ("acceleration", "catching", "awareness"), ("agility",)),
    "WR": (("catching", "speed", "catchInTraffic"), ("acceleration", "awareness"), ("agility",)),
    "TE": (("catching", "runBlock", "passBlock"), ("speed", "catchInTraffic", "awareness"), ("agility",)),
    "OL": (("runBlock", "passBlock"), ("awareness",), ("speed",)),
    "DL": (("passRushPower", "passRushSpeed", "runStop"), ("speed", "awareness"), ("agility",)),
    "LB": (("runStop", "coverage", "awareness"), ("speed", "passRushSpeed"), ("agility",)),
    "CB": (("coverage", "speed", "acceleration"), ("awareness", "intelligence"), ("agility",)),
    "S": (("coverage", "runStop", "speed"), ("awareness", "intelligence"), ("agility",)),
    "K": (("kickPower", "kickAccuracy"), ("awareness",), ("kickPower",)),
    "P": (("kickPower", "kickAccuracy"), ("awareness",), ("kickPower",)),
}

# Roster template used by the default league builder.
ROSTER_TEMPLATE: dict[str, int] = {
    "QB": 2, "RB": 3, "WR": 5, "TE": 2, "OL": 7,
    "DL": 6, "LB": 5, "CB": 4, "S": 3, "K": 1, "P": 1,
}

# Retirement.
RETIREMENT_AGE_START = 33
RETIREMENT_CHANCE_PER_YEAR = 0.20
FORCED_RETIREMENT_AGE = 38

# Season transition housekeeping.
MAX_RETIRED_IN_MEMORY = 50
MAX_STATS_HISTORY_SEASONS = 5

# Competitive balance: top quarter by wins tires, bottom quarter grows.
BALANCE_TOP_TIER = 0.25
BALANCE_BOTTOM_TIER = 0.75
VETERAN_FATIGUE_AGE = 28
VETERAN_FATIGUE_CHANCE = 0.15
VETERAN_FATIGUE_FLOOR = 50
VETERAN_FATIGUE_ATTRIBUTES = ("speed", "acceleration", "agility", "stamina")
YOUTH_BOOST_AGE = 25
YOUTH_BOOST_CHANCE = 0.20
YOUTH_BOOST_ATTRIBUTES = ("awareness", "intelligence")
