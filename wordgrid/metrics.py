import logging
import time
from contextlib import contextmanager

logger = logging.getLogger("wordgrid")


class GridMetrics:
    """Timings and solver counts for one ``/grid`` request.

    Stages are wall-clock milliseconds. ``solved_candidates`` is how many new
    solver cache entries the request produced, so a fully cached seed reports 0.
    """

    def __init__(self, seed: str):
        self.seed = seed
        self.timings: dict[str, float] = {}
        self.solved_candidates = 0
        self.word_count = 0
        self.longest_length = 0
        self._start = time.perf_counter()

    @contextmanager
    def stage(self, name: str):
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.timings[name] = round((time.perf_counter() - t0) * 1000, 1)

    @contextmanager
    def generation(self, engine):
        """Time the ``generate`` stage and count the solves it added to ``engine``'s cache."""
        before = engine.cache_size()
        with self.stage("generate"):
            yield
        # A concurrent cache clear can shrink the cache mid-request
        self.solved_candidates = max(engine.cache_size() - before, 0)

    def record_result(self, result):
        self.word_count = len(result.all_words)
        self.longest_length = result.longest_length

    @property
    def total_ms(self) -> float:
        return round((time.perf_counter() - self._start) * 1000, 1)

    def summary(self) -> dict:
        return {**self.timings, "total": self.total_ms}

    def log(self):
        stages = " ".join(f"{name}={ms:.1f}ms" for name, ms in self.timings.items())
        logger.info("Seed %r: %s solved=%d words=%d longest=%d",
                    self.seed, stages, self.solved_candidates, self.word_count, self.longest_length)
