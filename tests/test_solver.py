import asyncio
import time

from wordgrid.dictionary import WordDictionary
from wordgrid.grid import find_word_path
from wordgrid.solver import SearchEngine, SolverResult, Trie, build_trie, find_words

BOARD = [
    ["C", "A", "T", "S"],
    ["R", "E", "P", "O"],
    ["B", "O", "N", "E"],
    ["D", "I", "G", "S"],
]


def _make_trie(words: list[str]) -> Trie:
    trie = Trie()
    for w in words:
        trie.insert(w)
    return trie


def test_basic_solve():
    words = ["cat", "cats", "car", "care", "bone", "bones", "rep", "pen", "pone",
             "dig", "digs", "one", "ones", "ape", "nod", "nog", "son", "repo",
             "open", "nope", "peon", "sing", "sign"]
    result = find_words(BOARD, _make_trie(words))
    assert "cat" in result
    assert "bone" in result
    assert "cats" in result
    # Every returned word must come from the dictionary
    assert result <= set(words)
    # "sing" needs S next to I, which this board does not have
    assert "sing" not in result


def test_trie_lowercases_and_counts():
    trie = _make_trie(["CAT", "cat", "Cats"])
    assert len(trie) == 2
    assert "c" in trie.root.children
    node = trie.root.children["c"].children["a"].children["t"]
    assert node.is_word
    assert node.children["s"].is_word


def test_build_trie_respects_min_length():
    trie = build_trie(["at", "ate", "tea"], min_length=3)
    assert len(trie) == 2
    assert not trie.root.children["a"].children["t"].is_word


def test_cat_and_cats_both_found():
    board = [
        ["C", "A", "X", "X"],
        ["X", "T", "S", "X"],
        ["X", "X", "X", "X"],
        ["X", "X", "X", "X"],
    ]
    result = find_words(board, _make_trie(["cat", "cats"]))
    assert result == {"cat", "cats"}


def test_qu_cell():
    board = [
        ["QU", "I", "T"],
        ["E",  "S", "A"],
        ["N",  "D", "R"],
    ]
    words = ["quit", "quite", "quest", "quits", "sat", "set", "ten", "den", "star"]
    result = find_words(board, _make_trie(words))
    assert "quit" in result
    assert "quits" in result
    assert "sat" in result


def test_qu_cell_needs_both_letters():
    board = [["QU", "A"], ["I", "D"]]
    # "qid" would need a bare Q tile
    result = find_words(board, _make_trie(["qid", "quad", "quid"]))
    assert result == {"quad", "quid"}


def test_no_revisit():
    """A word requiring revisiting a cell should not be found."""
    board = [
        ["A", "B"],
        ["C", "D"],
    ]
    # "aba" requires revisiting cell (0,0)
    trie = _make_trie(["aba", "ab", "abc"])
    result = find_words(board, trie, min_word_length=2)
    assert "aba" not in result
    assert "ab" in result
    assert "abc" in result


def test_backtracking_frees_cells_for_other_branches():
    board = [
        ["T", "E", "A"],
        ["X", "X", "X"],
        ["X", "X", "X"],
    ]
    # Both words start at T and reuse E on separate branches
    result = find_words(board, _make_trie(["tea", "tee"]))
    assert result == {"tea"}
    board[1][1] = "E"
    result = find_words(board, _make_trie(["tea", "tee"]))
    assert result == {"tea", "tee"}


def test_min_word_length_filters_short_words():
    trie = Trie()
    for w in ["at", "a", "cat", "cats"]:
        trie.insert(w)
    board = [["C", "A"], ["S", "T"]]
    assert find_words(board, trie, min_word_length=3) == {"cat", "cats"}
    assert find_words(board, trie, min_word_length=4) == {"cats"}
    assert "at" in find_words(board, trie, min_word_length=1)


def test_empty_results_for_no_matches():
    board = [["Z", "Z"], ["Z", "Z"]]
    result = find_words(board, _make_trie(["cat", "dog"]))
    assert result == set()


def test_found_words_have_tile_paths():
    words = ["cat", "cats", "care", "bone", "bones", "rep", "pen", "pone", "dig", "digs",
             "one", "ones", "ape", "nod", "nog", "repo", "open", "nope", "peon", "tape"]
    for word in find_words(BOARD, _make_trie(words)):
        assert find_word_path(BOARD, word) is not None


def test_solver_result_longest_stats():
    result = SolverResult.from_words(["cats", "bone", "cat", "bones", "pones", "cat"])
    assert result.all_words == ("bone", "bones", "cat", "cats", "pones")
    assert result.longest_length == 5
    assert result.longest_words == ("bones", "pones")
    assert result.longest_count == 2


def test_solver_result_empty():
    result = SolverResult.from_words([])
    assert result.all_words == ()
    assert result.longest_length == 0
    assert result.longest_words == ()
    assert result.longest_count == 0


def test_solver_result_to_dict_cap():
    result = SolverResult.from_words(["cat", "cats", "bone", "bones"])
    data = result.to_dict(max_results=2)
    assert data["all_words"] == ["bone", "bones"]
    assert data["word_count"] == 4
    assert data["longest_words"] == ["bones"]
    assert result.to_dict()["all_words"] == ["bone", "bones", "cat", "cats"]


def test_engine_memoizes_by_seed():
    engine = SearchEngine(WordDictionary.preloaded(["cat", "cats", "bone"]))

    first = asyncio.run(engine.solve_for_seed(BOARD, "seed-0"))
    assert "cats" in first.all_words

    # Same seed, different grid: the cached result comes back untouched
    other = [["Z"] * 4 for _ in range(4)]
    again = asyncio.run(engine.solve_for_seed(other, "seed-0"))
    assert again is first

    engine.clear_cache()
    fresh = asyncio.run(engine.solve_for_seed(other, "seed-0"))
    assert fresh.all_words == ()


def test_engine_cache_hit_equals_fresh_solve():
    words = ["cat", "cats", "bone", "bones", "one", "ones"]
    cached_engine = SearchEngine(WordDictionary.preloaded(words))
    asyncio.run(cached_engine.solve_for_seed(BOARD, "s"))
    hit = asyncio.run(cached_engine.solve_for_seed(BOARD, "s"))

    fresh = asyncio.run(SearchEngine(WordDictionary.preloaded(words)).solve_for_seed(BOARD, "s"))
    assert hit == fresh


def test_engine_min_word_length_kept_apart():
    engine = SearchEngine(WordDictionary.preloaded(["cat", "cats"]))
    default = asyncio.run(engine.solve_for_seed(BOARD, "s"))
    longer = asyncio.run(engine.solve_for_seed(BOARD, "s", min_word_length=4))
    assert default.all_words == ("cat", "cats")
    assert longer.all_words == ("cats",)
    assert engine.cached_result("s") is default
    assert engine.cached_result("s", 4) is longer


def test_engine_trie_built_once():
    engine = SearchEngine(WordDictionary.preloaded(["cat", "cats"]))
    first = asyncio.run(engine.ensure_trie())
    second = asyncio.run(engine.ensure_trie())
    assert first is second
    assert len(first) == 2


def test_verify_solver_accuracy():
    engine = SearchEngine(WordDictionary.preloaded(["cat", "cats", "bone", "bones", "digs"]))
    accurate, issues = asyncio.run(engine.verify_solver_accuracy(BOARD, "verify"))
    assert accurate
    assert issues == []


def test_performance_with_full_dictionary(tmp_path):
    """Solve a 4x4 board with a decent-size dictionary under 500ms."""
    import itertools

    dict_file = tmp_path / "dict.txt"
    words = []
    # Generate many 3-4 letter words from common letters
    letters = "abcdefghijklmnoprstue"
    for length in range(3, 5):
        for combo in itertools.combinations(letters, length):
            words.append("".join(combo))
            if len(words) > 5000:
                break
        if len(words) > 5000:
            break
    dict_file.write_text("\n".join(words))
    trie = build_trie(dict_file.read_text().split(), min_length=3)

    board = [
        ["T", "A", "P", "E"],
        ["I", "N", "S", "O"],
        ["E", "D", "R", "L"],
        ["K", "G", "H", "M"],
    ]

    start = time.perf_counter()
    result = find_words(board, trie)
    elapsed = time.perf_counter() - start

    assert elapsed < 0.5, f"Solver took {elapsed:.3f}s (expected <0.5s)"
    assert len(result) > 0
