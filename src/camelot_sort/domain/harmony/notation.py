"""
Musical key notation: Camelot wheel <-> (pitch class, mode).

Pitch classes follow the chromatic numbering 0=C, 1=C#/Db, ..., 11=B.
The Camelot wheel numbers keys 1-12 with A for minor and B for major;
neighbouring numbers and same-number A/B pairs mix harmonically.

The sort weight table is derived from the Camelot table, so the two can
never disagree.
"""

import re
from enum import Enum
from typing import Dict, Tuple

from .exceptions import InvalidCamelotCode, UnrecognizedKeyString


class Mode(Enum):
    """Tonality of a key."""

    MAJOR = "major"
    MINOR = "minor"


Key = Tuple[int, Mode]

# Returned by sort_weight() for pairs outside the wheel
UNKNOWN_WEIGHT = 990

# Camelot number -> (pitch class of the A/minor key, pitch class of the B/major key)
_WHEEL: Dict[int, Tuple[int, int]] = {
    1: (8, 11),  # G#m / B
    2: (3, 6),  # Ebm / F#
    3: (10, 1),  # Bbm / Db
    4: (5, 8),  # Fm / Ab
    5: (0, 3),  # Cm / Eb
    6: (7, 10),  # Gm / Bb
    7: (2, 5),  # Dm / F
    8: (9, 0),  # Am / C
    9: (4, 7),  # Em / G
    10: (11, 2),  # Bm / D
    11: (6, 9),  # F#m / A
    12: (1, 4),  # Dbm / E
}

CAMELOT_TO_KEY: Dict[Tuple[int, Mode], int] = {}
for _number, (_minor, _major) in _WHEEL.items():
    CAMELOT_TO_KEY[(_number, Mode.MINOR)] = _minor
    CAMELOT_TO_KEY[(_number, Mode.MAJOR)] = _major

KEY_TO_CAMELOT: Dict[Key, int] = {
    (pitch, mode): number for (number, mode), pitch in CAMELOT_TO_KEY.items()
}

del _number, _minor, _major

# Enharmonic root spellings -> pitch class
PITCH_CLASSES: Dict[str, int] = {
    "C": 0,
    "C#": 1,
    "Db": 1,
    "D": 2,
    "D#": 3,
    "Eb": 3,
    "E": 4,
    "F": 5,
    "F#": 6,
    "Gb": 6,
    "G": 7,
    "G#": 8,
    "Ab": 8,
    "A": 9,
    "A#": 10,
    "Bb": 10,
    "B": 11,
}

_CAMELOT_PATTERN = re.compile(r"(\d{1,2})\s*([AB])")


def camelot_to_internal(code: str) -> Key:
    """Convert a Camelot code such as "8A" to (pitch_class, mode).

    Args:
        code: Camelot code, case-insensitive, surrounding whitespace ignored

    Returns:
        (pitch_class, mode)

    Raises:
        InvalidCamelotCode: If the number is missing or outside 1-12, or the
            letter is not A/B

    Examples:
        >>> camelot_to_internal("8A")
        (9, <Mode.MINOR: 'minor'>)
        >>> camelot_to_internal(" 12b ")
        (4, <Mode.MAJOR: 'major'>)
    """
    clean = (code or "").strip().upper()
    match = _CAMELOT_PATTERN.fullmatch(clean)
    if not match:
        raise InvalidCamelotCode(code)

    number = int(match.group(1))
    mode = Mode.MINOR if match.group(2) == "A" else Mode.MAJOR
    pitch = CAMELOT_TO_KEY.get((number, mode))
    if pitch is None:
        raise InvalidCamelotCode(code)
    return pitch, mode


def free_text_to_internal(text: str) -> Key:
    """Convert a free-text key such as "F#m", "Gb minor" or "C" to (pitch_class, mode).

    Minor iff the text contains "m" but not "maj" (case-insensitive). The root
    is the first character plus an optional "#" or flat "b"/"B".

    Raises:
        UnrecognizedKeyString: If the root does not name a pitch
    """
    clean = (text or "").strip().replace("♯", "#").replace("♭", "b")
    if not clean:
        raise UnrecognizedKeyString(text)

    lowered = clean.lower()
    mode = Mode.MINOR if "m" in lowered and "maj" not in lowered else Mode.MAJOR

    root = clean[0].upper()
    if len(clean) > 1:
        accidental = clean[1]
        if accidental == "#":
            root += "#"
        elif accidental in ("b", "B"):
            root += "b"

    pitch = PITCH_CLASSES.get(root)
    if pitch is None:
        raise UnrecognizedKeyString(text)
    return pitch, mode


def parse_key(text: str) -> Key:
    """Parse a key that may be either Camelot or free-text notation.

    Camelot is tried first so that "8A" is never read as A major.

    Raises:
        UnrecognizedKeyString: If neither notation applies
    """
    try:
        return camelot_to_internal(text)
    except InvalidCamelotCode:
        return free_text_to_internal(text)


def camelot_ordinal(code: str) -> int:
    """Sort ordinal of a Camelot code: 1A -> 10, 1B -> 11, ..., 12B -> 121."""
    pitch, mode = camelot_to_internal(code)
    return sort_weight(pitch, mode)


def sort_weight(pitch_class: int, mode: Mode) -> int:
    """Position of a key on the Camelot wheel, for ordering.

    Returns number * 10 + (1 if major else 0), or UNKNOWN_WEIGHT for pairs
    that are not on the wheel.
    """
    number = KEY_TO_CAMELOT.get((pitch_class, mode))
    if number is None:
        return UNKNOWN_WEIGHT
    return number * 10 + (1 if mode is Mode.MAJOR else 0)


def internal_to_camelot(pitch_class: int, mode: Mode) -> str:
    """Format (pitch_class, mode) as a Camelot code, or "?" if not on the wheel."""
    number = KEY_TO_CAMELOT.get((pitch_class, mode))
    if number is None:
        return "?"
    return f"{number}{'A' if mode is Mode.MINOR else 'B'}"
