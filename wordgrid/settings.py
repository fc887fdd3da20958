import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Settings:
    BASE_DIR: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    DICTIONARY_AFF_SOURCE: str = ""
    DICTIONARY_DIC_SOURCE: str = ""
    EXPAND_INFLECTIONS: bool = True
    FETCH_TIMEOUT: float = 30.0

    MIN_WORD_LENGTH: int = 3
    MAX_WORD_LENGTH: int = 20

    MIN_VOWELS: int = 4
    MAX_VOWELS: int = 7
    MIN_LONGEST_LENGTH: int = 6
    MAX_GENERATION_ATTEMPTS: int = 200

    MAX_RESULTS: int = 0
    DEBUG: bool = False
    PORT: int = 10001

    def __post_init__(self):
        dict_dir = self.BASE_DIR / "dictionaries"
        if not self.DICTIONARY_AFF_SOURCE:
            self.DICTIONARY_AFF_SOURCE = str(dict_dir / "en_GB.aff")
        if not self.DICTIONARY_DIC_SOURCE:
            self.DICTIONARY_DIC_SOURCE = str(dict_dir / "en_GB.dic")

        # Override from environment
        for fld in self.__dataclass_fields__:
            env_val = os.environ.get(fld)
            if env_val is not None:
                current = getattr(self, fld)
                if isinstance(current, bool):
                    setattr(self, fld, env_val.lower() in ("1", "true", "yes"))
                elif isinstance(current, int):
                    setattr(self, fld, int(env_val))
                elif isinstance(current, float):
                    setattr(self, fld, float(env_val))
                elif isinstance(current, Path):
                    setattr(self, fld, Path(env_val))
                else:
                    setattr(self, fld, env_val)


# Fields that may be changed at runtime through /api/settings
EDITABLE_FIELDS: dict[str, type] = {
    "MIN_WORD_LENGTH": int,
    "MIN_VOWELS": int,
    "MAX_VOWELS": int,
    "MIN_LONGEST_LENGTH": int,
    "MAX_GENERATION_ATTEMPTS": int,
    "MAX_RESULTS": int,
    "DEBUG": bool,
}


def get_editable_settings(cfg: Settings) -> dict:
    return {name: getattr(cfg, name) for name in EDITABLE_FIELDS}


def _coerce(value, target: type):
    if target is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("1", "true", "yes"):
                return True
            if lowered in ("0", "false", "no"):
                return False
        raise ValueError(f"expected a boolean, got {value!r}")
    if target is int:
        if isinstance(value, bool):
            raise ValueError(f"expected an integer, got {value!r}")
        return int(value)
    if target is float:
        return float(value)
    return str(value)


# Inclusive (low, high) bounds for editable integers; None means unbounded
FIELD_BOUNDS: dict[str, tuple[int | None, int | None]] = {
    "MIN_WORD_LENGTH": (1, None),
    "MIN_VOWELS": (0, 16),
    "MAX_VOWELS": (0, 16),
    "MIN_LONGEST_LENGTH": (1, None),
    "MAX_GENERATION_ATTEMPTS": (1, None),
    "MAX_RESULTS": (0, None),
}


def _check_bounds(name: str, value):
    low, high = FIELD_BOUNDS.get(name, (None, None))
    if low is not None and value < low:
        raise ValueError(f"must be at least {low}, got {value}")
    if high is not None and value > high:
        raise ValueError(f"must be at most {high}, got {value}")


def update_settings(cfg: Settings, **values) -> dict[str, str]:
    """Apply editable values to ``cfg``.

    Valid fields are applied even when others fail. Returns a mapping of
    field name to error message for the ones that were rejected; rejected
    fields keep their previous value.
    """
    errors: dict[str, str] = {}
    accepted: dict = {}
    for name, value in values.items():
        if name not in EDITABLE_FIELDS:
            if name in cfg.__dataclass_fields__:
                errors[name] = "field is not editable"
            else:
                errors[name] = "unknown field"
            continue
        try:
            coerced = _coerce(value, EDITABLE_FIELDS[name])
            _check_bounds(name, coerced)
        except (TypeError, ValueError) as e:
            errors[name] = str(e)
            continue
        accepted[name] = coerced

    # The vowel band is checked on the values it would end up with
    min_vowels = accepted.get("MIN_VOWELS", cfg.MIN_VOWELS)
    max_vowels = accepted.get("MAX_VOWELS", cfg.MAX_VOWELS)
    if min_vowels > max_vowels:
        for name in ("MIN_VOWELS", "MAX_VOWELS"):
            if name in accepted:
                del accepted[name]
                errors[name] = f"MIN_VOWELS ({min_vowels}) must not exceed MAX_VOWELS ({max_vowels})"

    for name, value in accepted.items():
        setattr(cfg, name, value)
    return errors


settings = Settings()
