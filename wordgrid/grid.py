from __future__ import annotations

import logging
import math
import random
from typing import TYPE_CHECKING

from wordgrid.rng import SeededRandom

if TYPE_CHECKING:
    from wordgrid.solver import SearchEngine, SolverResult

logger = logging.getLogger("wordgrid")

GRID_SIZE = 4

# English letter frequencies (percent), in pool order
LETTER_FREQUENCIES: dict[str, float] = {
    "E": 12.7, "T": 9.1, "A": 8.2, "O": 7.5, "I": 7.0, "N": 6.7,
    "S": 6.3, "H": 6.1, "R": 6.0, "D": 4.3, "L": 4.0, "C": 2.8,
    "U": 2.8, "M": 2.4, "W": 2.4, "F": 2.2, "G": 2.0, "Y": 2.0,
    "P": 1.9, "B": 1.5, "V": 1.0, "K": 0.8, "J": 0.15, "X": 0.15,
    "Q": 0.10, "Z": 0.07,
}

VOWELS = frozenset("AEIOU")
MIN_VOWELS = 4
MAX_VOWELS = 7
MIN_LONGEST_LENGTH = 6
MAX_GENERATION_ATTEMPTS = 200

Position = tuple[int, int]


def _build_weighted_letters(frequencies: dict[str, float]) -> list[str]:
    pool: list[str] = []
    for letter, freq in frequencies.items():
        # round half up
        pool.extend([letter] * math.floor(freq * 10 + 0.5))
    return pool


WEIGHTED_LETTERS = _build_weighted_letters(LETTER_FREQUENCIES)


def _tile(letter: str) -> str:
    return "QU" if letter == "Q" else letter


def count_vowels(grid: list[list[str]]) -> int:
    return sum(1 for row in grid for letter in row if letter in VOWELS)


def generate_candidate_grid(seed: str, attempt: int) -> list[list[str]]:
    """Grid for one generation attempt, drawn from ``SeededRandom(f"{seed}-{attempt}")``."""
    rng = SeededRandom(f"{seed}-{attempt}")
    return [
        [_tile(WEIGHTED_LETTERS[math.floor(rng.next() * len(WEIGHTED_LETTERS))]) for _ in range(GRID_SIZE)]
        for _ in range(GRID_SIZE)
    ]


def generate_grid(seed: str | None = None) -> list[list[str]]:
    """Unvalidated grid. Without a seed the draw is not reproducible."""
    draw = SeededRandom(seed).next if seed else random.random
    return [
        [_tile(WEIGHTED_LETTERS[math.floor(draw() * len(WEIGHTED_LETTERS))]) for _ in range(GRID_SIZE)]
        for _ in range(GRID_SIZE)
    ]


async def generate_validated_grid(
    seed: str,
    engine: SearchEngine,
    *,
    min_vowels: int = MIN_VOWELS,
    max_vowels: int = MAX_VOWELS,
    min_longest_length: int = MIN_LONGEST_LENGTH,
    max_attempts: int = MAX_GENERATION_ATTEMPTS,
    min_word_length: int | None = None,
) -> tuple[list[list[str]], SolverResult]:
    """First candidate grid for ``seed`` whose longest word meets the bar.

    Candidates outside the vowel band are skipped without solving. If no
    attempt meets the bar, the candidate with the longest best word is
    returned; if nothing passed the vowel filter, attempt 0 is solved and
    returned as is.
    """
    best_grid = None
    best_result = None
    best_length = 0

    for attempt in range(max_attempts):
        candidate = generate_candidate_grid(seed, attempt)
        vowel_count = count_vowels(candidate)
        if vowel_count < min_vowels or vowel_count > max_vowels:
            continue

        result = await engine.solve_for_seed(candidate, f"{seed}-{attempt}", min_word_length)
        if result.longest_length >= min_longest_length:
            logger.info("Seed %r accepted at attempt %d (longest=%d)", seed, attempt, result.longest_length)
            return candidate, result

        if result.longest_length > best_length:
            best_length = result.longest_length
            best_grid = candidate
            best_result = result

    if best_grid is not None and best_result is not None:
        logger.info("Seed %r: no grid met the bar, using best (longest=%d)", seed, best_length)
        return best_grid, best_result

    logger.warning("Seed %r: no candidate passed the filters, using attempt 0", seed)
    fallback = generate_candidate_grid(seed, 0)
    return fallback, await engine.solve_for_seed(fallback, f"{seed}-0", min_word_length)


def are_adjacent(pos1: Position, pos2: Position) -> bool:
    row_diff = abs(pos1[0] - pos2[0])
    col_diff = abs(pos1[1] - pos2[1])
    return row_diff <= 1 and col_diff <= 1 and (row_diff != 0 or col_diff != 0)


def is_position_in_path(pos: Position, path: list[Position]) -> bool:
    return any(p[0] == pos[0] and p[1] == pos[1] for p in path)


def word_from_path(grid: list[list[str]], path: list[Position]) -> str:
    return "".join(grid[r][c] for r, c in path)


def is_valid_path(grid: list[list[str]], path: list[Position]) -> bool:
    """In bounds, no cell twice, each step to a neighbouring cell."""
    rows = len(grid)
    for i, (r, c) in enumerate(path):
        if not (0 <= r < rows and 0 <= c < len(grid[r])):
            return False
        if is_position_in_path((r, c), path[:i]):
            return False
        if i and not are_adjacent(path[i - 1], (r, c)):
            return False
    return True


def find_word_path(grid: list[list[str]], word: str) -> list[Position] | None:
    """A tile path spelling ``word``, or None if the grid cannot form it."""
    target = word.lower()
    rows = len(grid)

    def extend(path: list[Position], matched: int) -> list[Position] | None:
        if matched == len(target):
            return path
        r, c = path[-1]
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                nr, nc = r + dr, c + dc
                if (dr or dc) and 0 <= nr < rows and 0 <= nc < len(grid[nr]) and (nr, nc) not in path:
                    token = grid[nr][nc].lower()
                    if target.startswith(token, matched):
                        found = extend(path + [(nr, nc)], matched + len(token))
                        if found:
                            return found
        return None

    for r in range(rows):
        for c in range(len(grid[r])):
            token = grid[r][c].lower()
            if token and target.startswith(token):
                found = extend([(r, c)], len(token))
                if found:
                    return found
    return None
