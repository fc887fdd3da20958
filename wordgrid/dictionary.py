import asyncio
import codecs
import enum
import logging
import re
import tempfile
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Iterator, Protocol

import httpx

logger = logging.getLogger("wordgrid")

MIN_WORD_LENGTH = 3
MAX_WORD_LENGTH = 20

INFLECTION_SUFFIXES = ("s", "es", "ed", "ing", "er", "est", "ly", "ies", "ied", "ier", "iest", "y")
DOUBLING_CONSONANTS = frozenset("bdfglmnprst")

# Hunspell's default when the .aff file has no SET line
DEFAULT_ENCODING = "ISO8859-1"

_STEM_END = re.compile(r"[/\s]")
_SET_LINE = re.compile(rb"^SET\s+(\S+)", re.MULTILINE)


class DictionaryLoadError(Exception):
    """Dictionary source data could not be fetched or parsed."""


class LoadState(enum.Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class WordChecker(Protocol):
    def correct(self, word: str) -> bool: ...


class HunspellChecker:
    """Adapts a spylls Hunspell dictionary to the ``correct(word)`` predicate."""

    def __init__(self, hunspell):
        self._hunspell = hunspell

    def correct(self, word: str) -> bool:
        return self._hunspell.lookup(word)


def hunspell_checker(aff_data: bytes, dic_data: bytes) -> HunspellChecker:
    """Parse raw .aff/.dic bytes with spylls.

    spylls only reads from files, so the data is written to a temporary
    directory first and decoded there according to the .aff SET line.
    """
    from spylls.hunspell import Dictionary

    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp) / "lexicon"
        base.with_suffix(".aff").write_bytes(aff_data)
        base.with_suffix(".dic").write_bytes(dic_data)
        return HunspellChecker(Dictionary.from_files(str(base)))


def detect_encoding(aff_data: bytes) -> str:
    match = _SET_LINE.search(aff_data)
    name = match.group(1).decode("ascii", errors="replace") if match else DEFAULT_ENCODING
    try:
        return codecs.lookup(name).name
    except LookupError:
        logger.warning("Unknown dictionary encoding %r, falling back to %s", name, DEFAULT_ENCODING)
        return codecs.lookup(DEFAULT_ENCODING).name


def parse_dic_stems(dic_text: str) -> Iterator[str]:
    """Yield lowercased stems from a .dic file, skipping the leading count line."""
    for line in dic_text.splitlines()[1:]:
        line = line.strip()
        if not line:
            continue
        stem = _STEM_END.split(line, maxsplit=1)[0].lower()
        if stem:
            yield stem


def inflection_candidates(base: str) -> Iterator[str]:
    """Candidate inflected forms of ``base``. Candidates still need confirming."""
    for suffix in INFLECTION_SUFFIXES:
        yield base + suffix
        if base.endswith("e") and not suffix.startswith("e"):
            yield base[:-1] + suffix
        if base.endswith("y") and len(base) > 2:
            yield base[:-1] + "i" + suffix
        if base[-1] in DOUBLING_CONSONANTS and len(base) > 2:
            yield base + base[-1] + suffix


def build_word_set(
    stems: Iterable[str],
    checker: WordChecker,
    expand_inflections: bool = True,
    min_length: int = MIN_WORD_LENGTH,
    max_length: int = MAX_WORD_LENGTH,
) -> frozenset[str]:
    words: set[str] = set()
    bases: list[str] = []
    for stem in stems:
        if stem in words or not stem.isalpha() or not (min_length <= len(stem) <= max_length):
            continue
        if checker.correct(stem):
            words.add(stem)
            bases.append(stem)

    if expand_inflections:
        rejected: set[str] = set()
        for base in bases:
            for candidate in inflection_candidates(base):
                if candidate in words or candidate in rejected:
                    continue
                if min_length <= len(candidate) <= max_length and checker.correct(candidate):
                    words.add(candidate)
                else:
                    rejected.add(candidate)
        logger.info("Expanded %d base words to %d with inflections", len(bases), len(words))

    return frozenset(words)


Fetcher = Callable[[str], Awaitable[bytes]]
CheckerFactory = Callable[[bytes, bytes], WordChecker]


async def _fetch_source(client: httpx.AsyncClient, source: str) -> bytes:
    if source.startswith(("http://", "https://")):
        resp = await client.get(source)
        resp.raise_for_status()
        return resp.content
    return await asyncio.to_thread(Path(source).read_bytes)


class WordDictionary:
    """The admissible word set, loaded at most once.

    ``load()`` is single-flight: concurrent callers await the same in-flight
    task. A failed load installs nothing and leaves the dictionary ready for
    another attempt. Queries made before a successful load answer ``False``.
    """

    def __init__(
        self,
        aff_source: str,
        dic_source: str,
        *,
        expand_inflections: bool = True,
        fetcher: Fetcher | None = None,
        checker_factory: CheckerFactory = hunspell_checker,
        timeout: float = 30.0,
        min_length: int = MIN_WORD_LENGTH,
        max_length: int = MAX_WORD_LENGTH,
    ):
        self.aff_source = aff_source
        self.dic_source = dic_source
        self.expand_inflections = expand_inflections
        self.min_length = min_length
        self.max_length = max_length
        self.timeout = timeout
        self._fetcher = fetcher
        self._checker_factory = checker_factory

        self.state = LoadState.NOT_LOADED
        self.last_error: Exception | None = None
        self._words: frozenset[str] | None = None
        self._task: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, cfg) -> "WordDictionary":
        return cls(
            cfg.DICTIONARY_AFF_SOURCE,
            cfg.DICTIONARY_DIC_SOURCE,
            expand_inflections=cfg.EXPAND_INFLECTIONS,
            timeout=cfg.FETCH_TIMEOUT,
            min_length=cfg.MIN_WORD_LENGTH,
            max_length=cfg.MAX_WORD_LENGTH,
        )

    @classmethod
    def preloaded(cls, words: Iterable[str], **kwargs) -> "WordDictionary":
        """An already loaded dictionary over an in-memory word list."""
        dictionary = cls("", "", **kwargs)
        dictionary._words = frozenset(
            w for w in (word.strip().lower() for word in words)
            if w.isalpha() and dictionary.min_length <= len(w) <= dictionary.max_length
        )
        dictionary.state = LoadState.LOADED
        return dictionary

    @property
    def is_loaded(self) -> bool:
        return self._words is not None

    @property
    def words(self) -> frozenset[str]:
        return self._words if self._words is not None else frozenset()

    async def load(self) -> None:
        if self._words is not None:
            return
        if self._task is None:
            self.state = LoadState.LOADING
            self._task = asyncio.create_task(self._load())
        await asyncio.shield(self._task)

    async def _load(self) -> None:
        try:
            logger.info("Loading dictionary from %s and %s", self.aff_source, self.dic_source)
            aff_data, dic_data = await self._fetch_sources()
            words = await asyncio.to_thread(self._build_words, aff_data, dic_data)
        except Exception as e:
            self.state = LoadState.FAILED
            self.last_error = e
            logger.error("Failed to load dictionary: %s", e)
            raise DictionaryLoadError(f"could not load dictionary: {e}") from e
        else:
            self._words = words
            self.state = LoadState.LOADED
            self.last_error = None
            logger.info("Dictionary loaded: %d words", len(words))
        finally:
            self._task = None
            if self.state is LoadState.LOADING:  # cancelled
                self.state = LoadState.NOT_LOADED

    async def _fetch_sources(self) -> tuple[bytes, bytes]:
        if self._fetcher is not None:
            return tuple(await asyncio.gather(self._fetcher(self.aff_source), self._fetcher(self.dic_source)))
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return tuple(await asyncio.gather(
                _fetch_source(client, self.aff_source),
                _fetch_source(client, self.dic_source),
            ))

    def _build_words(self, aff_data: bytes, dic_data: bytes) -> frozenset[str]:
        checker = self._checker_factory(aff_data, dic_data)
        dic_text = dic_data.decode(detect_encoding(aff_data), errors="replace")
        return build_word_set(
            parse_dic_stems(dic_text),
            checker,
            expand_inflections=self.expand_inflections,
            min_length=self.min_length,
            max_length=self.max_length,
        )

    def is_valid_word(self, word: str) -> bool:
        if self._words is None:
            logger.warning("Dictionary not loaded yet")
            return False
        normalized = word.lower().strip()
        if len(normalized) < self.min_length:
            return False
        return normalized in self._words

    def stats(self) -> dict:
        return {
            "state": self.state.value,
            "is_loaded": self.is_loaded,
            "word_count": len(self.words),
        }
