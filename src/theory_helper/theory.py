# src/theory_helper/theory.py
"""
Theory engine: scales, keys, intervals, chord progressions.

Every function here is pure. Inputs are the value objects from
``theory_helper.model``; results are fresh value objects. Nothing is cached
and no argument is ever mutated.
"""
from __future__ import annotations
import logging
from typing import List, Sequence, Tuple

from .config import TheorySettings, DEFAULT_SETTINGS
from .errors import EmptyInputError
from .model import (
    Note, Key, Chord, Scale, NoteRange,
    ChordSuggestion, MelodySuggestion, MelodyAnalysis, ProgressionAnalysis,
)
from .tables import (
    CHROMATIC_NOTES, SCALE_PATTERNS, CHORD_QUALITIES, ROMAN_NUMERALS,
    NUMERAL_DEGREES, CHORD_FUNCTIONS, PROGRESSIONS, INTERVAL_NAMES,
    MAJOR, tonic_index,
)

logger = logging.getLogger(__name__)

STEP_NAMES = {1: "H", 2: "W", 3: "W+H"}

# ---------- table lookups ----------

def _pattern(mode: str) -> Tuple[int, ...]:
    pattern = SCALE_PATTERNS.get(mode)
    if pattern is None:
        logger.debug("unknown mode %r, using the major pattern", mode)
        return MAJOR
    return pattern

def _quality(quality: str) -> Tuple[int, ...]:
    offsets = CHORD_QUALITIES.get(quality)
    if offsets is None:
        logger.debug("unknown chord quality %r, using major", quality)
        return CHORD_QUALITIES["major"]
    return offsets

def _root_index(name: str) -> int:
    idx = tonic_index(name)
    if idx < 0:
        logger.warning("pitch class %r is not in the chromatic table, treating it as C", name)
        return 0
    return idx

# ---------- scales ----------

def get_scale(tonic: str, mode: str) -> Scale:
    return Scale(name=f"{tonic} {mode}", intervals=_pattern(mode), modes=tuple(SCALE_PATTERNS))

def get_scale_notes(key: Key, scale_type: str, settings: TheorySettings = DEFAULT_SETTINGS) -> List[Note]:
    """
    Seven notes of ``scale_type`` on ``key.tonic``, placed from the reference
    pitch (middle C) upwards. An unknown ``scale_type`` falls back to
    ``key.mode``, and an unknown mode to major.
    """
    pattern = SCALE_PATTERNS.get(scale_type) or _pattern(key.mode)
    root = _root_index(key.tonic)
    return [
        Note(
            id=f"scale_note_{i}",
            pitch=root + interval + settings.reference_pitch,
            velocity=settings.scale_velocity,
            start_time=0,
            duration=1,
            track_id=settings.scale_track_id,
        )
        for i, interval in enumerate(pattern)
    ]

def step_pattern(mode: str) -> str:
    """Whole/half step spelling of a mode, e.g. 'W-W-H-W-W-W-H' for major."""
    pattern = _pattern(mode)
    closed = list(pattern) + [12]
    return "-".join(STEP_NAMES.get(b - a, str(b - a)) for a, b in zip(closed, closed[1:]))

def scale_degree_root(key: Key, degree: int) -> str:
    """Pitch-class name of the 0-based scale ``degree`` of ``key``."""
    pattern = _pattern(key.mode)
    interval = pattern[degree] if 0 <= degree < len(pattern) else 0
    return CHROMATIC_NOTES[(_root_index(key.tonic) + interval) % 12]

# ---------- keys ----------

def identify_key(notes: Sequence[Note], settings: TheorySettings = DEFAULT_SETTINGS) -> List[Key]:
    """
    Ranks all 12 x 8 keys by the share of the input's pitch classes that lie in
    their scale and returns the best ``settings.key_candidates``.

    Equal scores keep table order (tonic C..B outer, modes in declaration
    order inner). With no notes every key scores 0.0, so the result is simply
    the first candidates in that order.
    """
    unique = set(n.pitch_class for n in notes)
    if not unique:
        logger.debug("identify_key: no notes, all candidates score 0")

    scored: List[Tuple[Key, float]] = []
    for tonic_idx, tonic in enumerate(CHROMATIC_NOTES):
        for mode, pattern in SCALE_PATTERNS.items():
            scale_pcs = {(tonic_idx + interval) % 12 for interval in pattern}
            hits = sum(1 for pc in unique if pc in scale_pcs)
            score = hits / len(unique) if unique else 0.0
            scored.append((Key(tonic, mode), score))

    # stable sort: ties stay in table order
    ranked = sorted(scored, key=lambda item: item[1], reverse=True)
    return [key for key, _ in ranked[:settings.key_candidates]]

# ---------- intervals & melody ----------

def explain_interval(note_a: Note, note_b: Note) -> str:
    semitones = abs(note_b.pitch - note_a.pitch)
    octaves = semitones // 12
    description = INTERVAL_NAMES[semitones % 12]
    if octaves > 0:
        description += f" + {octaves} octave{'s' if octaves > 1 else ''}"
    return description

def _melody_direction(notes: Sequence[Note]) -> str:
    up = down = 0
    for prev, cur in zip(notes, notes[1:]):
        if cur.pitch > prev.pitch:
            up += 1
        elif cur.pitch < prev.pitch:
            down += 1
    if up > down * 2:
        return "ascending"
    if down > up * 2:
        return "descending"
    return "mixed"

def _outside_scale(notes: Sequence[Note], key: Key, settings: TheorySettings) -> List[MelodySuggestion]:
    scale_pcs = {n.pitch_class for n in get_scale_notes(key, key.mode, settings)}
    outside = tuple(n for n in notes if n.pitch_class not in scale_pcs)
    if not outside:
        return []
    return [MelodySuggestion(
        description="Some notes are outside the current scale",
        notes=outside,
        reason="Consider using scale tones or chromatic passing tones for smoother melodies.",
    )]

def analyze_melody(notes: Sequence[Note], key: Key, settings: TheorySettings = DEFAULT_SETTINGS) -> MelodyAnalysis:
    if not notes:
        raise EmptyInputError("Cannot analyze empty melody")
    notes = list(notes)
    by_pitch = sorted(notes, key=lambda n: n.pitch)
    return MelodyAnalysis(
        key=key,
        scale=get_scale(key.tonic, key.mode),
        intervals=tuple(explain_interval(a, b) for a, b in zip(notes, notes[1:])),
        direction=_melody_direction(notes),
        range=NoteRange(lowest=by_pitch[0], highest=by_pitch[-1]),
        suggestions=tuple(_outside_scale(notes, key, settings)),
    )

# ---------- chords ----------

def get_chord_tones(chord: Chord) -> List[int]:
    root = _root_index(chord.root)
    return [(root + interval) % 12 for interval in _quality(chord.quality)]

def get_chord_voicings(chord: Chord) -> List[List[str]]:
    """
    Root position plus, for chords of three or more tones, first and second
    inversion. Names are pitch classes only, so the octave added to the
    rotated tones does not show up in the result.
    """
    root = _root_index(chord.root)
    q = _quality(chord.quality)

    def names(offsets):
        return [CHROMATIC_NOTES[(root + o) % 12] for o in offsets]

    voicings = [names(q)]
    if len(q) >= 3:
        voicings.append(names([q[1], q[2], q[0] + 12]))
        voicings.append(names([q[2], q[0] + 12, q[1] + 12]))
    return voicings

def roman_numeral(chord: Chord, key: Key) -> str:
    """Roman numeral of ``chord`` in ``key``; '?' when its root is not a scale tone."""
    key_idx = tonic_index(key.tonic)
    chord_idx = tonic_index(chord.root)
    if key_idx < 0 or chord_idx < 0:
        return "?"
    step = (chord_idx - key_idx) % 12
    pattern = _pattern(key.mode)
    if step not in pattern:
        return "?"
    row = ROMAN_NUMERALS["major"] if key.mode == "major" else ROMAN_NUMERALS["minor"]
    return row[pattern.index(step)]

def numeral_degree(numeral: str) -> int:
    """0-based degree of a numeral ('vii°' -> 6); anything unparsable is 0."""
    clean = numeral.replace("°", "").replace("+", "").lower()
    return NUMERAL_DEGREES.get(clean, 0)

def chord_function(numeral: str) -> str:
    return CHORD_FUNCTIONS[numeral_degree(numeral)]

def roman_numeral_to_chord(numeral: str, key: Key) -> Chord:
    # case decides the quality, so only major/minor triads come out of here
    quality = "major" if numeral == numeral.upper() else "minor"
    return Chord(
        id=f"chord_{numeral}",
        root=scale_degree_root(key, numeral_degree(numeral)),
        quality=quality,
        extensions=(),
        inversion=0,
    )

def diatonic_chords(key: Key) -> List[Tuple[str, Chord]]:
    """The seven triads of ``key``, labelled with the key's numeral row."""
    row = ROMAN_NUMERALS["major"] if key.mode == "major" else ROMAN_NUMERALS["minor"]
    out = []
    for degree, numeral in enumerate(row):
        if "°" in numeral:
            quality = "diminished"
        else:
            quality = "major" if numeral == numeral.upper() else "minor"
        out.append((numeral, Chord(
            id=f"chord_{numeral}", root=scale_degree_root(key, degree),
            quality=quality, extensions=(), inversion=0,
        )))
    return out

# ---------- progressions ----------

def _common_first_chords(key: Key) -> List[ChordSuggestion]:
    suggestions = [ChordSuggestion(
        chord=Chord(id="1", root=key.tonic, quality=key.mode, extensions=(), inversion=0),
        confidence=0.9,
        reason="Tonic chord - establishes the key center",
    )]
    if key.mode == "major":
        # root is scale degree index 3
        suggestions.append(ChordSuggestion(
            chord=Chord(id="2", root=scale_degree_root(key, 3), quality="minor", extensions=(), inversion=0),
            confidence=0.7,
            reason="vi chord - relative minor, common starting point",
        ))
    return suggestions

def suggest_next_chord(current_chords: Sequence[Chord], key: Key) -> List[ChordSuggestion]:
    """
    Next-chord candidates in table order. An empty progression gets the
    common opening chords; a last chord whose numeral has no table row gets [].
    """
    if not current_chords:
        return _common_first_chords(key)
    last = roman_numeral(current_chords[-1], key)
    return [
        ChordSuggestion(chord=roman_numeral_to_chord(t.numeral, key), confidence=t.confidence, reason=t.reason)
        for t in PROGRESSIONS.get(last, ())
    ]

def _key_from_chords(chords: Sequence[Chord]) -> Key:
    counts = {}
    for c in chords:
        counts[c.root] = counts.get(c.root, 0) + 1
    # max() keeps the first root seen among equal counts
    tonic = max(counts, key=counts.get)
    majors = sum(1 for c in chords if c.quality == "major")
    minors = sum(1 for c in chords if c.quality == "minor")
    return Key(tonic, "major" if majors >= minors else "minor")

def analyze_chord_progression(chords: Sequence[Chord]) -> ProgressionAnalysis:
    if not chords:
        raise EmptyInputError("Cannot analyze empty chord progression")
    chords = tuple(chords)
    key = _key_from_chords(chords)
    numerals = tuple(roman_numeral(c, key) for c in chords)
    return ProgressionAnalysis(
        key=key,
        chords=chords,
        roman_numerals=numerals,
        functions=tuple(chord_function(n) for n in numerals),
        suggestions=tuple(suggest_next_chord(chords, key)),
    )

def suggest_melody(chords: Sequence[Chord], key: Key, settings: TheorySettings = DEFAULT_SETTINGS) -> List[MelodySuggestion]:
    """One chord-tone fragment per chord, one chord per measure."""
    out = []
    for index, chord in enumerate(chords):
        notes = tuple(
            Note(
                id=f"suggestion_{index}_{tone}",
                pitch=tone + settings.reference_pitch,
                velocity=settings.suggestion_velocity,
                start_time=index * settings.beats_per_measure,
                duration=settings.suggestion_duration,
                track_id=settings.suggestion_track_id,
            )
            for tone in get_chord_tones(chord)
        )
        out.append(MelodySuggestion(
            description=f"Chord tones for {chord.root} {chord.quality}",
            notes=notes,
            reason="Chord tones provide strong harmonic support and are always safe choices for melody.",
        ))
    return out

# ---------- facade ----------

class TheoryService:
    """
    Stateless object form of the module functions, for callers that want to
    hold "a theory engine". Instances carry nothing but their settings.
    """
    def __init__(self, settings: TheorySettings = DEFAULT_SETTINGS):
        self.settings = settings

    def analyze_chord_progression(self, chords: Sequence[Chord]) -> ProgressionAnalysis:
        return analyze_chord_progression(chords)

    def suggest_next_chord(self, current_chords: Sequence[Chord], key: Key) -> List[ChordSuggestion]:
        return suggest_next_chord(current_chords, key)

    def analyze_melody(self, notes: Sequence[Note], key: Key) -> MelodyAnalysis:
        return analyze_melody(notes, key, self.settings)

    def get_scale_notes(self, key: Key, scale_type: str) -> List[Note]:
        return get_scale_notes(key, scale_type, self.settings)

    def identify_key(self, notes: Sequence[Note]) -> List[Key]:
        return identify_key(notes, self.settings)

    def get_chord_voicings(self, chord: Chord) -> List[List[str]]:
        return get_chord_voicings(chord)

    def explain_interval(self, note_a: Note, note_b: Note) -> str:
        return explain_interval(note_a, note_b)

    def suggest_melody(self, chords: Sequence[Chord], key: Key) -> List[MelodySuggestion]:
        return suggest_melody(chords, key, self.settings)

theory_service = TheoryService()
