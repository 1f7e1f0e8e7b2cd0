from __future__ import annotations
import argparse, logging, pathlib, sys
from typing import List
import yaml
from . import theory
from .config import load_config, theory_settings
from .errors import TheoryError, InvalidNoteError
from .model import Note, Key, Chord
from .tables import SCALE_PATTERNS, CHORD_QUALITIES
from .util.pitch import parse_pitch, pitch_class_name, note_name

# ---------- token parsing ----------

def parse_key(token: str) -> Key:
    """'C:major', 'a:minor', 'Eb:dorian'"""
    tonic, _, mode = (token or "").partition(":")
    mode = (mode or "major").strip().lower()
    if mode not in SCALE_PATTERNS:
        raise InvalidNoteError(f"Unknown mode in key {token!r} (choose from {', '.join(SCALE_PATTERNS)})")
    return Key(pitch_class_name(tonic), mode)

def parse_chord(token: str, index: int = 0) -> Chord:
    """'C:major', 'A:minor7'; quality defaults to major"""
    root, _, quality = (token or "").partition(":")
    quality = (quality or "major").strip().lower()
    if quality not in CHORD_QUALITIES:
        raise InvalidNoteError(f"Unknown chord quality in {token!r} (choose from {', '.join(CHORD_QUALITIES)})")
    return Chord(id=str(index + 1), root=pitch_class_name(root), quality=quality)

def notes_from_tokens(tokens: List[str]) -> List[Note]:
    # one beat per note, in the order given
    return [
        Note(id=str(i + 1), pitch=parse_pitch(t), velocity=80, start_time=i, duration=1, track_id="cli")
        for i, t in enumerate(tokens)
    ]

def _dump(data) -> None:
    sys.stdout.write(yaml.safe_dump(data, sort_keys=False, allow_unicode=True))

# ---------- commands ----------

def _cmd_scale(args, settings, default_key):
    key = Key(pitch_class_name(args.tonic), args.mode)
    # same fallback as get_scale_notes: an unknown type means the key's mode
    mode = args.type if args.type in SCALE_PATTERNS else key.mode
    notes = theory.get_scale_notes(key, mode, settings)
    _dump({
        "scale": theory.get_scale(key.tonic, mode).to_dict(),
        "steps": theory.step_pattern(mode),
        "notes": [{"degree": i + 1, "name": note_name(n.pitch), "pitch": n.pitch} for i, n in enumerate(notes)],
    })

def _cmd_key(args, settings, default_key):
    keys = theory.identify_key(notes_from_tokens(args.pitches), settings)
    _dump({"candidates": [str(k) for k in keys]})

def _cmd_interval(args, settings, default_key):
    a, b = notes_from_tokens([args.a, args.b])
    _dump({"interval": theory.explain_interval(a, b)})

def _cmd_voicings(args, settings, default_key):
    chord = parse_chord(f"{args.root}:{args.quality}")
    _dump({"chord": str(chord), "voicings": theory.get_chord_voicings(chord)})

def _cmd_progression(args, settings, default_key):
    chords = [parse_chord(t, i) for i, t in enumerate(args.chords)]
    _dump(theory.analyze_chord_progression(chords).to_dict())

def _cmd_next(args, settings, default_key):
    key = parse_key(args.key) if args.key else default_key
    chords = [parse_chord(t, i) for i, t in enumerate(args.chords)]
    _dump({"key": str(key), "suggestions": [s.to_dict() for s in theory.suggest_next_chord(chords, key)]})

def _cmd_melody(args, settings, default_key):
    key = parse_key(args.key) if args.key else default_key
    _dump(theory.analyze_melody(notes_from_tokens(args.pitches), key, settings).to_dict())

def _cmd_suggest_melody(args, settings, default_key):
    key = parse_key(args.key) if args.key else default_key
    chords = [parse_chord(t, i) for i, t in enumerate(args.chords)]
    _dump({"suggestions": [s.to_dict() for s in theory.suggest_melody(chords, key, settings)]})

def _cmd_chords(args, settings, default_key):
    key = parse_key(args.key) if args.key else default_key
    _dump({"key": str(key), "chords": [{"numeral": n, "chord": str(c)} for n, c in theory.diatonic_chords(key)]})

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="theory-helper", description="Music theory helper (scales, keys, chords)")
    p.add_argument("--config", dest="config", default=None, help="YAML config (defaults applied if omitted)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("scale", help="Notes of a scale")
    s.add_argument("tonic"); s.add_argument("mode", choices=list(SCALE_PATTERNS))
    s.add_argument("--type", default=None, help="Scale type, if different from the mode")
    s.set_defaults(func=_cmd_scale)

    s = sub.add_parser("key", help="Most likely keys for a set of pitches")
    s.add_argument("pitches", nargs="*", help="MIDI numbers or names like C4, F#3")
    s.set_defaults(func=_cmd_key)

    s = sub.add_parser("interval", help="Name the interval between two pitches")
    s.add_argument("a"); s.add_argument("b")
    s.set_defaults(func=_cmd_interval)

    s = sub.add_parser("voicings", help="Root position and inversions of a chord")
    s.add_argument("root"); s.add_argument("quality", choices=list(CHORD_QUALITIES))
    s.set_defaults(func=_cmd_voicings)

    s = sub.add_parser("progression", help="Analyze a chord progression (ROOT:QUALITY ...)")
    s.add_argument("chords", nargs="+")
    s.set_defaults(func=_cmd_progression)

    s = sub.add_parser("next", help="Suggest the next chord")
    s.add_argument("--key", default=None, help="TONIC:MODE (config default_key if omitted)")
    s.add_argument("chords", nargs="*")
    s.set_defaults(func=_cmd_next)

    s = sub.add_parser("melody", help="Analyze a melody")
    s.add_argument("--key", default=None, help="TONIC:MODE (config default_key if omitted)")
    s.add_argument("pitches", nargs="+")
    s.set_defaults(func=_cmd_melody)

    s = sub.add_parser("suggest-melody", help="Chord-tone melody fragments for a progression")
    s.add_argument("--key", default=None, help="TONIC:MODE (config default_key if omitted)")
    s.add_argument("chords", nargs="+")
    s.set_defaults(func=_cmd_suggest_melody)

    s = sub.add_parser("chords", help="Diatonic chords of a key")
    s.add_argument("--key", default=None, help="TONIC:MODE (config default_key if omitted)")
    s.set_defaults(func=_cmd_chords)
    return p

def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(name)s] %(levelname)s %(message)s")

    cfg_path = None
    if args.config:
        cfg_path = pathlib.Path(args.config).expanduser().resolve()
        if not cfg_path.exists():
            print(f"[cli] ERROR: Config not found: {cfg_path}", file=sys.stderr)
            sys.exit(1)

    cfg = load_config(cfg_path)
    settings = theory_settings(cfg)

    try:
        dk = cfg.get("default_key") or {}
        default_key = parse_key(f"{dk.get('tonic', 'C')}:{dk.get('mode', 'major')}")
        args.func(args, settings, default_key)
    except TheoryError as e:
        print(f"[cli] ERROR: {e}", file=sys.stderr)
        sys.exit(2)

if __name__ == "__main__":
    main()
