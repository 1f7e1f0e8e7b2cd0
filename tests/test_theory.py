"""Unit tests for theory_helper.theory."""
import unittest

from theory_helper import theory
from theory_helper.config import TheorySettings
from theory_helper.errors import EmptyInputError
from theory_helper.model import Note, Key, Chord
from theory_helper.tables import CHROMATIC_NOTES, SCALE_PATTERNS


def melody(*pitches):
    return [Note(id=str(i), pitch=p, velocity=80, start_time=i, duration=1, track_id="track1")
            for i, p in enumerate(pitches)]

C_MAJOR = Key("C", "major")
A_MINOR = Key("A", "minor")


class TestScaleNotes(unittest.TestCase):
    def test_c_major(self):
        notes = theory.get_scale_notes(C_MAJOR, "major")
        self.assertEqual([n.pitch for n in notes], [60, 62, 64, 65, 67, 69, 71])

    def test_a_minor_starts_above_middle_c(self):
        notes = theory.get_scale_notes(A_MINOR, "minor")
        self.assertEqual([n.pitch for n in notes], [69, 71, 72, 74, 76, 77, 79])

    def test_every_key_gives_seven_rising_notes(self):
        for idx, tonic in enumerate(CHROMATIC_NOTES):
            for mode in SCALE_PATTERNS:
                notes = theory.get_scale_notes(Key(tonic, mode), mode)
                pitches = [n.pitch for n in notes]
                self.assertEqual(len(pitches), 7)
                self.assertEqual(pitches[0], 60 + idx)
                self.assertTrue(all(a < b for a, b in zip(pitches, pitches[1:])), (tonic, mode))

    def test_theory_artifact_fields(self):
        first = theory.get_scale_notes(C_MAJOR, "major")[0]
        self.assertEqual(first.velocity, 64)
        self.assertEqual(first.start_time, 0)
        self.assertEqual(first.duration, 1)
        self.assertEqual(first.track_id, "theory_helper")
        self.assertEqual(first.id, "scale_note_0")

    def test_scale_type_overrides_mode(self):
        notes = theory.get_scale_notes(C_MAJOR, "minor")
        self.assertEqual(notes[2].pitch, 63)

    def test_unknown_scale_type_falls_back_to_key_mode(self):
        notes = theory.get_scale_notes(Key("D", "dorian"), "blues")
        self.assertEqual([n.pitch for n in notes], [62, 64, 65, 67, 69, 71, 72])

    def test_unknown_mode_falls_back_to_major(self):
        notes = theory.get_scale_notes(Key("C", "bebop"), "bebop")
        self.assertEqual([n.pitch for n in notes], [60, 62, 64, 65, 67, 69, 71])

    def test_aeolian_is_minor(self):
        self.assertEqual(theory.get_scale_notes(A_MINOR, "aeolian"), theory.get_scale_notes(A_MINOR, "minor"))

    def test_settings_move_reference_octave(self):
        settings = TheorySettings(reference_pitch=48, scale_velocity=100)
        notes = theory.get_scale_notes(C_MAJOR, "major", settings)
        self.assertEqual(notes[0].pitch, 48)
        self.assertEqual(notes[0].velocity, 100)

    def test_step_pattern(self):
        self.assertEqual(theory.step_pattern("major"), "W-W-H-W-W-W-H")
        self.assertEqual(theory.step_pattern("minor"), "W-H-W-W-H-W-W")


class TestIdentifyKey(unittest.TestCase):
    def test_c_major_first(self):
        keys = theory.identify_key(melody(60, 62, 64, 65, 67))
        self.assertEqual(len(keys), 3)
        self.assertEqual(keys[0], C_MAJOR)

    def test_ties_keep_table_order(self):
        keys = theory.identify_key(melody(60, 62, 64, 65, 67))
        self.assertEqual(keys, [Key("C", "major"), Key("C", "mixolydian"), Key("D", "minor")])

    def test_empty_input_scores_zero(self):
        keys = theory.identify_key([])
        self.assertEqual(keys, [Key("C", "major"), Key("C", "minor"), Key("C", "dorian")])

    def test_pitch_class(self):
        self.assertEqual([n.pitch_class for n in melody(0, 61, 127)], [0, 1, 7])

    def test_octave_duplicates_count_once(self):
        self.assertEqual(theory.identify_key(melody(60, 72, 84, 67)), theory.identify_key(melody(60, 67)))

    def test_candidate_count_from_settings(self):
        keys = theory.identify_key(melody(60, 64, 67), TheorySettings(key_candidates=5))
        self.assertEqual(len(keys), 5)


class TestExplainInterval(unittest.TestCase):
    def test_perfect_fifth(self):
        a, b = melody(60, 67)
        self.assertEqual(theory.explain_interval(a, b), "Perfect 5th")

    def test_major_third(self):
        a, b = melody(60, 64)
        self.assertEqual(theory.explain_interval(a, b), "Major 3rd")

    def test_compound_intervals(self):
        a, b, c, d = melody(60, 72, 79, 84)
        self.assertEqual(theory.explain_interval(a, b), "Unison + 1 octave")
        self.assertEqual(theory.explain_interval(a, c), "Perfect 5th + 1 octave")
        self.assertEqual(theory.explain_interval(a, d), "Unison + 2 octaves")

    def test_symmetric(self):
        notes = melody(48, 55, 61, 70, 83)
        for a in notes:
            for b in notes:
                self.assertEqual(theory.explain_interval(a, b), theory.explain_interval(b, a))


class TestAnalyzeMelody(unittest.TestCase):
    def test_ascending(self):
        result = theory.analyze_melody(melody(60, 62, 64, 67), C_MAJOR)
        self.assertEqual(result.direction, "ascending")
        self.assertEqual(result.range.lowest.pitch, 60)
        self.assertEqual(result.range.highest.pitch, 67)
        self.assertEqual(result.intervals, ("Major 2nd", "Major 2nd", "Minor 3rd"))
        self.assertEqual(result.suggestions, ())
        self.assertEqual(result.scale.name, "C major")

    def test_descending_and_mixed(self):
        self.assertEqual(theory.analyze_melody(melody(67, 64, 62, 60), C_MAJOR).direction, "descending")
        self.assertEqual(theory.analyze_melody(melody(60, 64, 62, 65), C_MAJOR).direction, "mixed")
        self.assertEqual(theory.analyze_melody(melody(60), C_MAJOR).direction, "mixed")

    def test_empty_melody_raises(self):
        with self.assertRaises(EmptyInputError) as cm:
            theory.analyze_melody([], C_MAJOR)
        self.assertEqual(str(cm.exception), "Cannot analyze empty melody")

    def test_outside_notes_bundled_in_one_suggestion(self):
        notes = melody(60, 61, 62, 63)
        result = theory.analyze_melody(notes, C_MAJOR)
        self.assertEqual(len(result.suggestions), 1)
        self.assertEqual([n.pitch for n in result.suggestions[0].notes], [61, 63])

    def test_range_ties_follow_stable_sort(self):
        notes = melody(67, 60, 60, 67)
        result = theory.analyze_melody(notes, C_MAJOR)
        self.assertIs(result.range.lowest, notes[1])
        self.assertIs(result.range.highest, notes[3])

    def test_idempotent(self):
        notes = melody(60, 66, 64, 59)
        self.assertEqual(theory.analyze_melody(notes, C_MAJOR), theory.analyze_melody(notes, C_MAJOR))


class TestChords(unittest.TestCase):
    def test_voicings_c_major(self):
        voicings = theory.get_chord_voicings(Chord("C", "major"))
        self.assertEqual(voicings, [["C", "E", "G"], ["E", "G", "C"], ["G", "C", "E"]])

    def test_voicings_a_minor(self):
        self.assertEqual(theory.get_chord_voicings(Chord("A", "minor"))[0], ["A", "C", "E"])

    def test_seventh_chord_inversions_use_first_three_tones(self):
        voicings = theory.get_chord_voicings(Chord("C", "major7"))
        self.assertEqual(voicings[0], ["C", "E", "G", "B"])
        self.assertEqual(voicings[1:], [["E", "G", "C"], ["G", "C", "E"]])

    def test_chord_tones(self):
        self.assertEqual(theory.get_chord_tones(Chord("A", "minor")), [9, 0, 4])
        self.assertEqual(theory.get_chord_tones(Chord("G", "dominant7")), [7, 11, 2, 5])
        self.assertEqual(theory.get_chord_tones(Chord("C", "sus9")), [0, 4, 7])

    def test_roman_numerals(self):
        self.assertEqual(theory.roman_numeral(Chord("G", "major"), C_MAJOR), "V")
        self.assertEqual(theory.roman_numeral(Chord("B", "diminished"), C_MAJOR), "vii°")
        self.assertEqual(theory.roman_numeral(Chord("C", "major"), A_MINOR), "III")
        self.assertEqual(theory.roman_numeral(Chord("C#", "major"), C_MAJOR), "?")

    def test_chord_functions(self):
        self.assertEqual(theory.chord_function("V"), "dominant")
        self.assertEqual(theory.chord_function("vii°"), "dominant")
        self.assertEqual(theory.chord_function("ii°"), "subdominant")
        self.assertEqual(theory.chord_function("?"), "tonic")

    def test_diatonic_chords(self):
        chords = theory.diatonic_chords(C_MAJOR)
        self.assertEqual([n for n, _ in chords], ["I", "ii", "iii", "IV", "V", "vi", "vii°"])
        self.assertEqual([str(c) for _, c in chords],
                         ["C major", "D minor", "E minor", "F major", "G major", "A minor", "B diminished"])
        minor = theory.diatonic_chords(A_MINOR)
        self.assertEqual(str(minor[1][1]), "B diminished")
        self.assertEqual(str(minor[2][1]), "C major")


class TestSuggestNextChord(unittest.TestCase):
    def test_empty_progression_major(self):
        suggestions = theory.suggest_next_chord([], C_MAJOR)
        self.assertEqual(len(suggestions), 2)
        self.assertEqual(suggestions[0].chord.root, "C")
        self.assertEqual(suggestions[0].confidence, 0.9)
        self.assertEqual(suggestions[1].confidence, 0.7)
        self.assertEqual(suggestions[1].chord.quality, "minor")
        # degree index 3 of the scale
        self.assertEqual(suggestions[1].chord.root, "F")

    def test_empty_progression_minor_has_only_tonic(self):
        suggestions = theory.suggest_next_chord([], A_MINOR)
        self.assertEqual(len(suggestions), 1)
        self.assertEqual(suggestions[0].chord.quality, "minor")

    def test_after_tonic(self):
        suggestions = theory.suggest_next_chord([Chord("C", "major")], C_MAJOR)
        self.assertEqual([(str(s.chord), s.confidence) for s in suggestions],
                         [("A minor", 0.8), ("F major", 0.7), ("G major", 0.6)])
        self.assertTrue(all(s.reason for s in suggestions))
        self.assertEqual(set(suggestions[0].to_dict()), {"chord", "confidence", "reason"})

    def test_after_dominant_keeps_declared_order(self):
        suggestions = theory.suggest_next_chord([Chord("F", "major"), Chord("G", "major")], C_MAJOR)
        self.assertEqual([(str(s.chord), s.confidence) for s in suggestions],
                         [("C major", 0.95), ("A minor", 0.6)])

    def test_after_vi(self):
        suggestions = theory.suggest_next_chord([Chord("A", "minor")], C_MAJOR)
        self.assertEqual([str(s.chord) for s in suggestions], ["F major", "D minor"])

    def test_numeral_without_row_gives_nothing(self):
        self.assertEqual(theory.suggest_next_chord([Chord("A", "minor")], A_MINOR), [])
        self.assertEqual(theory.suggest_next_chord([Chord("C#", "major")], C_MAJOR), [])


class TestAnalyzeChordProgression(unittest.TestCase):
    def test_pop_progression(self):
        chords = [Chord("C", "major"), Chord("A", "minor"), Chord("F", "major"), Chord("G", "major")]
        result = theory.analyze_chord_progression(chords)
        self.assertEqual(result.key, C_MAJOR)
        self.assertEqual(result.roman_numerals, ("I", "vi", "IV", "V"))
        self.assertEqual(result.functions, ("tonic", "tonic", "subdominant", "dominant"))
        self.assertEqual(str(result.suggestions[0].chord), "C major")
        self.assertEqual(result.chords, tuple(chords))

    def test_root_tie_goes_to_first_seen(self):
        chords = [Chord("G", "major"), Chord("C", "major"), Chord("C", "major"), Chord("G", "major")]
        result = theory.analyze_chord_progression(chords)
        self.assertEqual(result.key, Key("G", "major"))
        self.assertEqual(result.roman_numerals, ("I", "IV", "IV", "I"))

    def test_minor_majority(self):
        chords = [Chord("A", "minor"), Chord("D", "minor"), Chord("E", "major")]
        result = theory.analyze_chord_progression(chords)
        self.assertEqual(result.key, A_MINOR)
        self.assertEqual(result.roman_numerals, ("i", "iv", "v"))
        self.assertEqual(result.functions, ("tonic", "subdominant", "dominant"))
        self.assertEqual(result.suggestions, ())

    def test_empty_progression_raises(self):
        with self.assertRaises(EmptyInputError) as cm:
            theory.analyze_chord_progression([])
        self.assertEqual(str(cm.exception), "Cannot analyze empty chord progression")

    def test_idempotent(self):
        chords = [Chord("D", "minor"), Chord("G", "dominant7"), Chord("C", "major7")]
        self.assertEqual(theory.analyze_chord_progression(chords), theory.analyze_chord_progression(chords))


class TestSuggestMelody(unittest.TestCase):
    def test_chord_tones_per_measure(self):
        suggestions = theory.suggest_melody([Chord("C", "major"), Chord("A", "minor")], C_MAJOR)
        self.assertEqual(len(suggestions), 2)
        first, second = suggestions
        self.assertEqual([n.pitch for n in first.notes], [60, 64, 67])
        self.assertEqual([n.pitch for n in second.notes], [69, 60, 64])
        self.assertEqual({n.start_time for n in second.notes}, {4})
        self.assertEqual(second.notes[0].id, "suggestion_1_9")
        self.assertEqual(first.notes[0].velocity, 80)
        self.assertEqual(first.notes[0].track_id, "melody_suggestion")
        self.assertEqual(first.description, "Chord tones for C major")

    def test_no_chords(self):
        self.assertEqual(theory.suggest_melody([], C_MAJOR), [])


class TestTheoryService(unittest.TestCase):
    def test_delegates_with_settings(self):
        service = theory.TheoryService(TheorySettings(reference_pitch=72))
        self.assertEqual(service.get_scale_notes(C_MAJOR, "major")[0].pitch, 72)
        self.assertEqual(service.explain_interval(*melody(60, 67)), "Perfect 5th")
        self.assertEqual(theory.theory_service.identify_key([])[0], C_MAJOR)


if __name__ == "__main__":
    unittest.main()
