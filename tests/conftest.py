import pytest

from wordgrid.dictionary import WordDictionary

COMMON_WORDS = [
    "ate", "eat", "tea", "tee", "ten", "net", "nets", "nest", "rest", "tear", "rate",
    "star", "rats", "arts", "tars", "sent", "tens", "dens", "send", "ends", "dent",
    "rent", "tern", "stern", "rents", "earn", "near", "neat", "seat", "east", "eats",
    "teas", "sate", "state", "taste", "treat", "heat", "hate", "hear", "here", "there",
    "three", "other", "others", "hoist", "noise", "stone", "tones", "notes", "onset",
    "ration", "rations", "nation", "station", "senior", "interest", "insert", "inserts",
    "stare", "tears", "rates", "aster", "earnest", "eastern", "nearest", "tenor",
    "toner", "snore", "tone", "note", "son", "one", "ones", "nose", "rose", "sore",
    "ore", "roe", "toe", "hoe", "the", "then", "hen", "his", "hit", "its", "sit",
    "tin", "nit", "ion", "ions", "lion", "lions", "line", "lines", "liner", "dine",
    "diner", "diners", "tide", "tides", "edit", "edits", "aide", "idea", "ideas",
]


@pytest.fixture
def common_dictionary() -> WordDictionary:
    return WordDictionary.preloaded(COMMON_WORDS)
