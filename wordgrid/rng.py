import math
import random
import string

SEED_ALPHABET = string.digits + string.ascii_lowercase


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def hash_string(text: str) -> int:
    """Polynomial rolling hash (h = h*31 + c) over UTF-16 code units, as a non-negative int."""
    # Lone surrogates are kept as code units
    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = _to_int32(h * 31 + unit)
    return abs(h)


class SeededRandom:
    """Deterministic float stream from a string seed.

    Each draw is ``frac(sin(counter) * 10000)`` with the counter starting at
    the seed hash. Fast and reproducible, not suitable for anything
    security-sensitive.
    """

    def __init__(self, seed: str):
        self.seed: int = hash_string(seed)

    def next(self) -> float:
        x = math.sin(self.seed) * 10000
        self.seed += 1
        return x - math.floor(x)

    def next_int(self, min_value: int, max_value: int) -> int:
        return math.floor(self.next() * (max_value - min_value + 1)) + min_value


def generate_seed_code(length: int = 8) -> str:
    """Random seed code for callers that did not supply one. Not reproducible."""
    return "".join(random.choice(SEED_ALPHABET) for _ in range(length))
