from __future__ import annotations

import random

FIRST_NAMES = [
    "Aaron", "Andre", "Antonio", "Austin", "Brandon", "Brock", "Bryce", "Caleb", "Cameron", "Carson",
    "Chase", "Cole", "Colton", "Cooper", "Dalton", "Damon", "Darius", "Davante", "Derrick", "Devin",
    "Dexter", "Dion", "Dwayne", "Elijah", "Emmitt", "Garrett", "Grady", "Hunter", "Isaiah", "Jalen",
    "Jamal", "Jarvis", "Javon", "Jaylen", "Jerome", "Jordan", "Josh", "Justin", "Kareem", "Keenan",
    "Kendall", "Kevin", "Khalil", "Kyler", "Lamar", "Landon", "Logan", "Malik", "Marcus", "Mason",
    "Micah", "Myles", "Nolan", "Omar", "Patrick", "Quentin", "Rashad", "Reggie", "Ricky", "Ryan",
    "Shane", "Stefon", "Tariq", "Terrell", "Trent", "Trevon", "Tristan", "Tyler", "Tyrone", "Walker",
    "Wyatt", "Xavier", "Zach", "Zeke",
]

LAST_NAMES = [
    "Adams", "Allen", "Armstrong", "Bailey", "Banks", "Barnes", "Bell", "Bennett", "Brooks", "Bryant",
    "Butler", "Carter", "Coleman", "Collins", "Cooper", "Crawford", "Davis", "Dawson", "Dixon", "Edwards",
    "Ellis", "Fields", "Fleming", "Ford", "Foster", "Gibson", "Gordon", "Graham", "Grant", "Green",
    "Griffin", "Hall", "Harris", "Hayes", "Henderson", "Hill", "Holmes", "Howard", "Hughes", "Jackson",
    "James", "Jenkins", "Johnson", "Jones", "Jordan", "Kelly", "King", "Knight", "Lewis", "Mack",
    "Marshall", "Mason", "Matthews", "McCoy", "Miller", "Mitchell", "Moore", "Morgan", "Murray", "Nelson",
    "Owens", "Parker", "Patterson", "Payne", "Perry", "Peterson", "Porter", "Price", "Reed", "Rice",
    "Richardson", "Roberts", "Robinson", "Sanders", "Scott", "Simmons", "Smith", "Spencer", "Stewart", "Taylor",
    "Thomas", "Thompson", "Tucker", "Turner", "Walker", "Wallace", "Ward", "Washington", "Watkins", "Watson",
    "White", "Williams", "Wilson", "Woods", "Wright", "Young",
]

SUFFIXES = ("Jr.", "II", "III", "IV")


class NameGenerator:
    """Hands out league-unique player and coach names from a shuffled pool."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._used: set[str] = set()
        self._pool = [f"{first} {last}" for first in FIRST_NAMES for last in LAST_NAMES]
        self._rng.shuffle(self._pool)

    def reserve(self, names: list[str]) -> None:
        self._used.update(names)

    def next_name(self) -> str:
        while self._pool:
            name = self._pool.pop()
            if name not in self._used:
                self._used.add(name)
                return name

        # Pool exhausted: reuse a base name with a generational suffix.
        base = f"{self._rng.choice(FIRST_NAMES)} {self._rng.choice(LAST_NAMES)}"
        for suffix in SUFFIXES:
            candidate = f"{base} {suffix}"
            if candidate not in self._used:
                self._used.add(candidate)
                return candidate
        count = len(self._used)
        candidate = f"{base} {count}"
        self._used.add(candidate)
        return candidate
