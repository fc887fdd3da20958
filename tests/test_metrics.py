from wordgrid.metrics import GridMetrics
from wordgrid.solver import SolverResult


class _FakeEngine:
    def __init__(self, size: int = 0):
        self.size = size

    def cache_size(self) -> int:
        return self.size


def test_generation_counts_new_cache_entries():
    engine = _FakeEngine(size=2)
    metrics = GridMetrics("abc")
    with metrics.generation(engine):
        engine.size += 3
    assert metrics.solved_candidates == 3
    assert "generate" in metrics.timings


def test_generation_survives_cache_clear():
    engine = _FakeEngine(size=5)
    metrics = GridMetrics("abc")
    with metrics.generation(engine):
        engine.size = 1
    assert metrics.solved_candidates == 0


def test_summary_has_stages_and_total():
    metrics = GridMetrics("abc")
    with metrics.stage("dictionary"):
        pass
    summary = metrics.summary()
    assert set(summary) == {"dictionary", "total"}
    assert summary["total"] >= summary["dictionary"] >= 0


def test_record_result():
    metrics = GridMetrics("abc")
    metrics.record_result(SolverResult.from_words(["tone", "stone", "ton"]))
    assert metrics.word_count == 3
    assert metrics.longest_length == 5
