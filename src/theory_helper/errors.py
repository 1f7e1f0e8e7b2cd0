# src/theory_helper/errors.py
from __future__ import annotations

class TheoryError(Exception):
    """Base class for errors raised by the theory engine."""

class EmptyInputError(TheoryError, ValueError):
    """Analysis was asked for on an empty note or chord sequence."""

class InvalidNoteError(TheoryError, ValueError):
    """A pitch, chord or key token could not be parsed."""
