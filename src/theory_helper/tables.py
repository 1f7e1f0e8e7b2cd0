# src/theory_helper/tables.py
from __future__ import annotations
from types import MappingProxyType
from typing import Mapping, Tuple, NamedTuple

CHROMATIC_NOTES: Tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

MAJOR = (0, 2, 4, 5, 7, 9, 11)
NATURAL_MINOR = (0, 2, 3, 5, 7, 8, 10)

# declaration order matters: identify_key breaks ties by it
SCALE_PATTERNS: Mapping[str, Tuple[int, ...]] = MappingProxyType({
    "major":      MAJOR,
    "minor":      NATURAL_MINOR,
    "dorian":     (0, 2, 3, 5, 7, 9, 10),
    "phrygian":   (0, 1, 3, 5, 7, 8, 10),
    "lydian":     (0, 2, 4, 6, 7, 9, 11),
    "mixolydian": (0, 2, 4, 5, 7, 9, 10),
    "aeolian":    NATURAL_MINOR,
    "locrian":    (0, 1, 3, 5, 6, 8, 10),
})

CHORD_QUALITIES: Mapping[str, Tuple[int, ...]] = MappingProxyType({
    "major":       (0, 4, 7),
    "minor":       (0, 3, 7),
    "diminished":  (0, 3, 6),
    "augmented":   (0, 4, 8),
    "major7":      (0, 4, 7, 11),
    "minor7":      (0, 3, 7, 10),
    "dominant7":   (0, 4, 7, 10),
    "diminished7": (0, 3, 6, 9),
})

# major row for the major mode, minor row for every other mode
ROMAN_NUMERALS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "major": ("I", "ii", "iii", "IV", "V", "vi", "vii°"),
    "minor": ("i", "ii°", "III", "iv", "v", "VI", "VII"),
})

NUMERAL_DEGREES: Mapping[str, int] = MappingProxyType({
    "i": 0, "ii": 1, "iii": 2, "iv": 3, "v": 4, "vi": 5, "vii": 6,
})

# one function per scale degree 0..6
CHORD_FUNCTIONS: Tuple[str, ...] = ("tonic", "subdominant", "tonic", "subdominant", "dominant", "tonic", "dominant")

class Transition(NamedTuple):
    numeral: str
    confidence: float
    reason: str

PROGRESSIONS: Mapping[str, Tuple[Transition, ...]] = MappingProxyType({
    "I": (
        Transition("vi", 0.8, "I-vi is a very common progression"),
        Transition("IV", 0.7, "I-IV establishes subdominant function"),
        Transition("V",  0.6, "I-V creates tension"),
    ),
    "vi": (
        Transition("IV", 0.9, "vi-IV is extremely popular in pop music"),
        Transition("ii", 0.7, "vi-ii creates smooth voice leading"),
    ),
    "IV": (
        Transition("V", 0.9, "IV-V is a classic subdominant to dominant movement"),
        Transition("I", 0.7, "IV-I is a plagal cadence"),
    ),
    "V": (
        Transition("I",  0.95, "V-I is the strongest resolution in tonal music"),
        Transition("vi", 0.6,  "V-vi is a deceptive cadence"),
    ),
})

INTERVAL_NAMES: Tuple[str, ...] = (
    "Unison", "Minor 2nd", "Major 2nd", "Minor 3rd", "Major 3rd",
    "Perfect 4th", "Tritone", "Perfect 5th", "Minor 6th", "Major 6th",
    "Minor 7th", "Major 7th", "Octave",
)

def tonic_index(name: str) -> int:
    """Index in CHROMATIC_NOTES, -1 when the name is not a sharp-spelled pitch class."""
    try:
        return CHROMATIC_NOTES.index(name)
    except ValueError:
        return -1
