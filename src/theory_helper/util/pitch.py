from __future__ import annotations
import re
from ..errors import InvalidNoteError
from ..tables import CHROMATIC_NOTES

STEP_TO_SEMITONE = {"C":0,"D":2,"E":4,"F":5,"G":7,"A":9,"B":11}
ACCIDENTALS = {"#": 1, "b": -1, "": 0}

_NAME_RE = re.compile(r"^([A-Ga-g])(#|b)?(-?\d+)$")

def midi_from_pitch(step: str, alter: int, octave: int) -> int:
    return (octave + 1) * 12 + STEP_TO_SEMITONE[step] + int(alter)

def note_name(pitch: int) -> str:
    """60 -> 'C4' (sharp spelling)."""
    return f"{CHROMATIC_NOTES[pitch % 12]}{pitch // 12 - 1}"

def parse_pitch(text: str) -> int:
    """
    Accepts a MIDI number ("60") or a note name ("C4", "C#4", "Db3").
    Result must land in 0..127.
    """
    s = (text or "").strip()
    if s.lstrip("-").isdecimal():
        midi = int(s)
    else:
        m = _NAME_RE.match(s)
        if not m:
            raise InvalidNoteError(f"Not a pitch: {text!r}")
        step, acc, octave = m.group(1).upper(), m.group(2) or "", int(m.group(3))
        midi = midi_from_pitch(step, ACCIDENTALS[acc], octave)
    if not 0 <= midi <= 127:
        raise InvalidNoteError(f"Pitch out of MIDI range: {text!r}")
    return midi

def pitch_class_name(text: str) -> str:
    """Normalises 'db', 'Db', 'C#' ... to the sharp spelling used by the tables."""
    s = (text or "").strip()
    if not s:
        raise InvalidNoteError("Empty pitch class")
    step, acc = s[0].upper(), s[1:]
    if step not in STEP_TO_SEMITONE or acc not in ACCIDENTALS:
        raise InvalidNoteError(f"Not a pitch class: {text!r}")
    return CHROMATIC_NOTES[(STEP_TO_SEMITONE[step] + ACCIDENTALS[acc]) % 12]
