# src/theory_helper/model.py
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Dict, Any

# --- input values ---

@dataclass(frozen=True)
class Note:
    pitch: int             # MIDI 0..127
    velocity: int          # 0..127
    start_time: float      # beats
    duration: float        # beats
    track_id: str
    id: str = ""

    @property
    def pitch_class(self) -> int:
        return self.pitch % 12

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class Key:
    tonic: str             # "C", "C#", ... (sharp spelling)
    mode: str              # "major", "minor", "dorian", ...

    def __str__(self) -> str:
        return f"{self.tonic} {self.mode}"

    def to_dict(self) -> Dict[str, Any]:
        return {"tonic": self.tonic, "mode": self.mode}

@dataclass(frozen=True)
class Chord:
    root: str
    quality: str           # "major", "minor7", ...
    extensions: Tuple[str, ...] = ()
    inversion: Optional[int] = None
    id: str = ""

    def __str__(self) -> str:
        return f"{self.root} {self.quality}"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["extensions"] = list(self.extensions)
        return d

@dataclass(frozen=True)
class Scale:
    name: str
    intervals: Tuple[int, ...]
    modes: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "intervals": list(self.intervals), "modes": list(self.modes)}

# --- results ---

@dataclass(frozen=True)
class ChordSuggestion:
    chord: Chord
    confidence: float      # 0..1
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"chord": self.chord.to_dict(), "confidence": self.confidence, "reason": self.reason}

@dataclass(frozen=True)
class MelodySuggestion:
    description: str
    notes: Tuple[Note, ...]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "notes": [n.to_dict() for n in self.notes],
            "reason": self.reason,
        }

@dataclass(frozen=True)
class NoteRange:
    lowest: Note
    highest: Note

    def to_dict(self) -> Dict[str, Any]:
        return {"lowest": self.lowest.to_dict(), "highest": self.highest.to_dict()}

@dataclass(frozen=True)
class MelodyAnalysis:
    key: Key
    scale: Scale
    intervals: Tuple[str, ...]
    direction: str         # "ascending" | "descending" | "mixed"
    range: NoteRange
    suggestions: Tuple[MelodySuggestion, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.to_dict(),
            "scale": self.scale.to_dict(),
            "intervals": list(self.intervals),
            "direction": self.direction,
            "range": self.range.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
        }

@dataclass(frozen=True)
class ProgressionAnalysis:
    key: Key
    chords: Tuple[Chord, ...]
    roman_numerals: Tuple[str, ...]
    functions: Tuple[str, ...]
    suggestions: Tuple[ChordSuggestion, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.to_dict(),
            "chords": [c.to_dict() for c in self.chords],
            "roman_numerals": list(self.roman_numerals),
            "functions": list(self.functions),
            "suggestions": [s.to_dict() for s in self.suggestions],
        }
