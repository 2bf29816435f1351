"""PitchMapper: maps a vertical pointer coordinate to a staff position and pitch."""

from __future__ import annotations

import math
from typing import Final

from staffpitch.key_signatures import (
    DEFAULT_KEY,
    Accidental,
    KeySignature,
    get_key_signature,
)
from staffpitch.staff_models import (
    BASS,
    TREBLE,
    Pitch,
    ResolvedNote,
    StaffLayout,
    StaffPosition,
)

# ── Pitch constants ─────────────────────────────────────────────────────────
A4_FREQUENCY = 440.0
A4_MIDI = 69
SEMITONES_PER_OCTAVE = 12

#: Semitone offset of each natural letter from A in the same octave numbering
NATURAL_OFFSETS: Final[dict[str, int]] = {
    "C": -9,
    "D": -7,
    "E": -5,
    "F": -4,
    "G": -2,
    "A": 0,
    "B": 2,
}

#: Chromatic names used when spelling an arbitrary frequency (index 0 = C)
CHROMATIC_NAMES: Final[list[str]] = [
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"
]

# ── Staff tables ────────────────────────────────────────────────────────────
# (offset from the staff's top line in line spacings, letter, octave), top to bottom.
# Integer offsets are lines, half-integer offsets are spaces.

TREBLE_TABLE: Final[tuple[tuple[float, str, int], ...]] = (
    (-1.0, "A", 5),  # ledger line above
    (-0.5, "G", 5),
    (0.0, "F", 5),
    (0.5, "E", 5),
    (1.0, "D", 5),
    (1.5, "C", 5),
    (2.0, "B", 4),
    (2.5, "A", 4),
    (3.0, "G", 4),
    (3.5, "F", 4),
    (4.0, "E", 4),
    (4.5, "D", 4),
    (5.0, "C", 4),  # middle C, ledger line below
)

BASS_TABLE: Final[tuple[tuple[float, str, int], ...]] = (
    (-1.0, "C", 4),  # middle C, ledger line above
    (-0.5, "B", 3),
    (0.0, "A", 3),
    (0.5, "G", 3),
    (1.0, "F", 3),
    (1.5, "E", 3),
    (2.0, "D", 3),
    (2.5, "C", 3),
    (3.0, "B", 2),
    (3.5, "A", 2),
    (4.0, "G", 2),
    (4.5, "F", 2),  # space below the bottom line
)


class LayoutNotConfiguredError(RuntimeError):
    """Raised when resolving before any staff layout has been set."""


def semitones_from_a4(letter: str, octave: int, accidental: Accidental = Accidental.NATURAL) -> int:
    """Return the signed semitone distance of a pitch from A4."""
    return (
        NATURAL_OFFSETS[letter]
        + SEMITONES_PER_OCTAVE * (octave - 4)
        + accidental.semitones
    )


def frequency_for(letter: str, octave: int, accidental: Accidental = Accidental.NATURAL) -> float:
    """Equal-tempered frequency in Hz with A4 = 440 Hz."""
    semitones = semitones_from_a4(letter, octave, accidental)
    return A4_FREQUENCY * 2 ** (semitones / SEMITONES_PER_OCTAVE)


def note_name_from_frequency(frequency: float) -> str:
    """
    Spell the equal-tempered note nearest to ``frequency`` using sharps.

    Library helper for callers holding only a frequency; resolved notes
    already carry their key-aware name.

    Raises:
        ValueError: If the frequency is not positive and finite.
    """
    if not math.isfinite(frequency) or frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}.")
    semitones = round(SEMITONES_PER_OCTAVE * math.log2(frequency / A4_FREQUENCY))
    octave = (semitones + 9) // SEMITONES_PER_OCTAVE + 4
    return f"{CHROMATIC_NAMES[(semitones + 9) % SEMITONES_PER_OCTAVE]}{octave}"


def build_positions(layout: StaffLayout) -> list[StaffPosition]:
    """
    Build the canonical positions of both staves for a layout.

    Treble entries come first, then bass entries, each in table order. Entries
    whose canonical y values coincide are all kept.
    """
    positions: list[StaffPosition] = []
    for staff, table in ((TREBLE, TREBLE_TABLE), (BASS, BASS_TABLE)):
        origin = layout.origin_for(staff)
        for offset, letter, octave in table:
            positions.append(
                StaffPosition(
                    staff=staff,
                    offset=offset,
                    letter=letter,
                    octave=octave,
                    canonical_y=origin + offset * layout.line_spacing,
                )
            )
    return positions


class PitchMapper:
    """
    Resolves a y coordinate to the nearest staff line or space.

    The position table depends only on the layout and is rebuilt by
    ``set_layout``. The key signature only affects the accidental, frequency
    and labels of a match, never which position matches.

    Usage:

        mapper = PitchMapper(StaffLayout(), key_id="G")
        note = mapper.resolve(tap_y)
        if note is not None:
            sink.play(note.frequency)
    """

    #: Fraction of a line spacing added to the raw y before matching
    INPUT_BIAS = 1 / 8

    def __init__(self, layout: StaffLayout | None = None, key_id: str = DEFAULT_KEY) -> None:
        self._key: KeySignature = get_key_signature(key_id)
        self._layout: StaffLayout | None = None
        self._positions: list[StaffPosition] = []
        self._labels: dict[tuple[str, int], str] | None = None
        if layout is not None:
            self._apply_layout(layout)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def layout(self) -> StaffLayout | None:
        return self._layout

    @property
    def key_signature(self) -> KeySignature:
        return self._key

    @property
    def positions(self) -> list[StaffPosition]:
        """Canonical positions of the current layout, treble first."""
        return list(self._positions)

    def set_layout(self, treble_origin_y: float, bass_origin_y: float, line_spacing: float) -> None:
        """
        Replace the staff geometry, keeping the horizontal extent.

        Raises:
            ValueError: If a value is not finite or ``line_spacing`` is not positive.
        """
        previous = self._layout or StaffLayout()
        self._apply_layout(
            StaffLayout(
                treble_y=treble_origin_y,
                bass_y=bass_origin_y,
                line_spacing=line_spacing,
                staff_x=previous.staff_x,
                staff_width=previous.staff_width,
            )
        )

    def _apply_layout(self, layout: StaffLayout) -> None:
        positions = build_positions(layout)
        self._layout = layout
        self._positions = positions

    def set_key_signature(self, key_id: str) -> None:
        """
        Make ``key_id`` the active key signature.

        Raises:
            UnknownKeySignatureError: If the key is not in the catalog. The
                previously active key stays in effect.
        """
        key = get_key_signature(key_id)
        self._key = key
        self._labels = None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def pitch_for(self, position: StaffPosition) -> Pitch:
        """Apply the active key signature to a position's natural letter."""
        return Pitch(
            letter=position.letter,
            accidental=self._key.accidental_for(position.letter),
            octave=position.octave,
        )

    def nearest_position(self, y: float) -> StaffPosition | None:
        """
        Return the position closest to the biased ``y``, or None if it is
        half a line spacing or more away from every position.

        Raises:
            LayoutNotConfiguredError: If no layout has been set.
        """
        if self._layout is None:
            raise LayoutNotConfiguredError("set_layout() must be called before resolving.")

        line_spacing = self._layout.line_spacing
        biased_y = y + line_spacing * self.INPUT_BIAS

        # min() keeps the first of equally distant entries
        closest = min(self._positions, key=lambda pos: abs(pos.canonical_y - biased_y))
        if abs(closest.canonical_y - biased_y) < line_spacing / 2:
            return closest
        return None

    def resolve(self, y: float) -> ResolvedNote | None:
        """
        Map a y coordinate to a note under the active key signature.

        Returns:
            The resolved note (with the canonical y of the matched position),
            or None when the input is off the staff and should be ignored.

        Raises:
            LayoutNotConfiguredError: If no layout has been set.
        """
        position = self.nearest_position(y)
        if position is None:
            return None

        pitch = self.pitch_for(position)
        return ResolvedNote(
            pitch=pitch,
            frequency=frequency_for(pitch.letter, pitch.octave, pitch.accidental),
            canonical_y=position.canonical_y,
            position=position,
        )

    def note_labels(self) -> dict[tuple[str, int], str]:
        """
        Labels for every tabulated (letter, octave) under the active key.

        The labels are cached until the key signature changes.
        """
        if self._labels is None:
            self._labels = {}
            for _offset, letter, octave in TREBLE_TABLE + BASS_TABLE:
                accidental = self._key.accidental_for(letter)
                self._labels[(letter, octave)] = f"{letter}{accidental.glyph}{octave}"
        return dict(self._labels)
