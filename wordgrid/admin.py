import json
from dataclasses import dataclass, field
from typing import Iterable

from wordgrid.dictionary import MIN_WORD_LENGTH, WordDictionary


def _normalize(words: Iterable[str]) -> set[str]:
    return {w.strip().lower() for w in words if w and w.strip()}


@dataclass
class AdminWords:
    """Admin overrides: ``additions`` always count as words, ``blocklist`` never does."""

    additions: set[str] = field(default_factory=set)
    blocklist: set[str] = field(default_factory=set)

    @classmethod
    def from_dict(cls, data: dict) -> "AdminWords":
        return cls(
            additions=_normalize(data.get("additions") or []),
            blocklist=_normalize(data.get("blocklist") or []),
        )

    @classmethod
    def from_json(cls, text: str) -> "AdminWords":
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> dict:
        return {"additions": sorted(self.additions), "blocklist": sorted(self.blocklist)}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def is_word_valid(word: str, dictionary: WordDictionary, admin: AdminWords | None = None) -> bool:
    if len(word) < MIN_WORD_LENGTH:
        return False

    lower_word = word.lower()
    if admin is not None:
        if lower_word in admin.blocklist:
            return False
        if lower_word in admin.additions:
            return True

    return dictionary.is_valid_word(lower_word)
