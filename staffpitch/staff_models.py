"""Data models shared by the pitch mapper, the note tracker and the exporters."""

from __future__ import annotations

import math
from dataclasses import dataclass

from staffpitch.key_signatures import Accidental

TREBLE = "treble"
BASS = "bass"


@dataclass(frozen=True)
class StaffLayout:
    """
    Geometry of the grand staff in logical pixels.

    Attributes:
        treble_y:     y of the top line of the treble staff.
        bass_y:       y of the top line of the bass staff.
        line_spacing: Distance between two adjacent staff lines.
        staff_x:      Left edge of the staff lines.
        staff_width:  Horizontal extent of the staff lines.
    """

    treble_y: float = 80.0
    bass_y: float = 240.0
    line_spacing: float = 20.0
    staff_x: float = 100.0
    staff_width: float = 500.0

    def __post_init__(self) -> None:
        for name in ("treble_y", "bass_y", "line_spacing", "staff_x", "staff_width"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}.")
        if self.line_spacing <= 0:
            raise ValueError(f"line_spacing must be positive, got {self.line_spacing}.")

    def origin_for(self, staff: str) -> float:
        """Return the reference y of the given staff."""
        return self.treble_y if staff == TREBLE else self.bass_y

    def contains_x(self, x: float) -> bool:
        """True if ``x`` lies within the horizontal extent of the staff lines."""
        return self.staff_x <= x <= self.staff_x + self.staff_width


@dataclass(frozen=True)
class StaffPosition:
    """A line or space on one staff, addressed by its offset in line spacings."""

    staff: str
    offset: float
    letter: str
    octave: int
    canonical_y: float


@dataclass(frozen=True)
class Pitch:
    """A natural letter with the accidental the key signature gives it."""

    letter: str
    accidental: Accidental
    octave: int

    @property
    def name(self) -> str:
        """Human-readable pitch name, e.g. 'F#5' or 'Bb3'."""
        return f"{self.letter}{self.accidental.glyph}{self.octave}"


@dataclass(frozen=True)
class ResolvedNote:
    """The result of mapping a y coordinate onto the staff."""

    pitch: Pitch
    frequency: float
    canonical_y: float
    position: StaffPosition

    @property
    def name(self) -> str:
        return self.pitch.name


@dataclass(frozen=True)
class NoteEvent:
    """
    A transient marker drawn where a note was tapped.

    Attributes:
        note:       The resolved note (its canonical y places the marker).
        x:          Horizontal tap position.
        created_ms: Creation timestamp in milliseconds.
    """

    note: ResolvedNote
    x: float
    created_ms: float
