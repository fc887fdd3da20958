from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable

from wordgrid.dictionary import WordDictionary
from wordgrid.grid import find_word_path

logger = logging.getLogger("wordgrid")


class TrieNode:
    __slots__ = ("children", "is_word")

    def __init__(self):
        self.children: dict[str, TrieNode] = {}
        self.is_word: bool = False


class Trie:
    def __init__(self):
        self.root = TrieNode()
        self.size = 0

    def insert(self, word: str):
        node = self.root
        for ch in word.lower():
            if ch not in node.children:
                node.children[ch] = TrieNode()
            node = node.children[ch]
        if not node.is_word:
            node.is_word = True
            self.size += 1

    def __len__(self) -> int:
        return self.size


def build_trie(words: Iterable[str], min_length: int = 3) -> Trie:
    trie = Trie()
    for word in words:
        if len(word) >= min_length:
            trie.insert(word)
    return trie


def _neighbors(rows: int, cols: int) -> list[list[int]]:
    neighbors: list[list[int]] = []
    for idx in range(rows * cols):
        r, c = divmod(idx, cols)
        adj = []
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                nr, nc = r + dr, c + dc
                if 0 <= nr < rows and 0 <= nc < cols:
                    adj.append(nr * cols + nc)
        neighbors.append(adj)
    return neighbors


def find_words(grid: list[list[str]], trie: Trie, min_word_length: int = 3) -> set[str]:
    """Every trie word spelled by an adjacent, non-repeating path of cells.

    DFS from each cell with trie prefix pruning. The visited set is a bitmask
    passed by value, so a cell is free again once its branch returns.
    """
    rows = len(grid)
    cols = len(grid[0]) if rows else 0
    found: set[str] = set()

    # Most cells are one char, "QU" is two
    cell_chars = [grid[r][c].lower() for r in range(rows) for c in range(cols)]
    neighbors = _neighbors(rows, cols)

    def dfs(idx: int, node: TrieNode, path: str, visited: int):
        current = node
        for ch in cell_chars[idx]:
            current = current.children.get(ch)
            if current is None:
                return
        path += cell_chars[idx]
        visited |= 1 << idx

        if current.is_word and len(path) >= min_word_length:
            found.add(path)

        if current.children:
            for nidx in neighbors[idx]:
                if not (visited & (1 << nidx)):
                    dfs(nidx, current, path, visited)

    for start in range(rows * cols):
        dfs(start, trie.root, "", 0)

    return found


@dataclass(frozen=True)
class SolverResult:
    all_words: tuple[str, ...]
    longest_length: int
    longest_words: tuple[str, ...]
    longest_count: int

    @classmethod
    def from_words(cls, words: Iterable[str]) -> SolverResult:
        all_words = tuple(sorted(set(words)))
        longest_length = max((len(w) for w in all_words), default=0)
        longest_words = tuple(w for w in all_words if len(w) == longest_length) if all_words else ()
        return cls(all_words, longest_length, longest_words, len(longest_words))

    def to_dict(self, max_results: int = 0) -> dict:
        words = list(self.all_words)
        return {
            "all_words": words[:max_results] if max_results > 0 else words,
            "word_count": len(self.all_words),
            "longest_length": self.longest_length,
            "longest_words": list(self.longest_words),
            "longest_count": self.longest_count,
        }


class SearchEngine:
    """Owns the trie and the per-seed solver cache for one dictionary.

    The trie is built lazily, once, after the dictionary has loaded. Results
    are memoized by seed alone; ``clear_cache()`` is the only eviction.
    """

    def __init__(self, dictionary: WordDictionary, min_word_length: int = 3):
        self.dictionary = dictionary
        self.min_word_length = min_word_length
        self._trie: Trie | None = None
        self._trie_source: frozenset[str] | None = None
        self._cache: dict[str, SolverResult] = {}
        self._lock = threading.Lock()

    async def ensure_trie(self) -> Trie:
        await self.dictionary.load()
        words = self.dictionary.words
        with self._lock:
            if self._trie is None or self._trie_source is not words:
                self._trie = build_trie(words, self.dictionary.min_length)
                self._trie_source = words
                logger.info("Trie built with %d words", len(self._trie))
            return self._trie

    def _cache_key(self, seed: str, min_word_length: int) -> str:
        # Results for a non-default minimum length are kept apart from the seed's own entry
        if min_word_length == self.min_word_length:
            return seed
        return f"{seed}#min={min_word_length}"

    def cached_result(self, seed: str, min_word_length: int | None = None) -> SolverResult | None:
        if min_word_length is None:
            min_word_length = self.min_word_length
        return self._cache.get(self._cache_key(seed, min_word_length))

    async def solve_for_seed(
        self,
        grid: list[list[str]],
        seed: str,
        min_word_length: int | None = None,
    ) -> SolverResult:
        if min_word_length is None:
            min_word_length = self.min_word_length
        key = self._cache_key(seed, min_word_length)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        trie = await self.ensure_trie()
        result = SolverResult.from_words(find_words(grid, trie, min_word_length))

        with self._lock:
            return self._cache.setdefault(key, result)

    def clear_cache(self):
        with self._lock:
            self._cache.clear()

    def cache_size(self) -> int:
        return len(self._cache)

    async def verify_solver_accuracy(self, grid: list[list[str]], seed: str) -> tuple[bool, list[str]]:
        """Check a solved grid: every word must be admissible and traceable on the grid."""
        result = await self.solve_for_seed(grid, seed)
        issues: list[str] = []
        for word in result.all_words:
            if not self.dictionary.is_valid_word(word):
                issues.append(f'Solver found invalid word: "{word}"')
            if find_word_path(grid, word) is None:
                issues.append(f'Solver found word with no path on the grid: "{word}"')
        return not issues, issues
