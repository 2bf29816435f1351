"""Key signatures: the accidental applied to each natural letter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

# Standard order in which accidentals are added to a key signature
SHARP_ORDER: Final[tuple[str, ...]] = ("F", "C", "G", "D", "A", "E", "B")
FLAT_ORDER: Final[tuple[str, ...]] = ("B", "E", "A", "D", "G", "C", "F")


class UnknownKeySignatureError(ValueError):
    """Raised when a key id is not in the catalog."""


class Accidental(Enum):
    """Accidental derived from the active key signature."""

    NATURAL = ("", 0)
    SHARP = ("#", 1)
    FLAT = ("b", -1)

    def __init__(self, glyph: str, semitones: int) -> None:
        self.glyph = glyph
        self.semitones = semitones


@dataclass(frozen=True)
class KeySignature:
    """
    A key signature expressed as the letters it sharps or flats.

    Attributes:
        key_id: Catalog identifier, e.g. "G" or "Bb".
        sharps: Sharped letters in standard order (F, C, G, ...).
        flats:  Flatted letters in standard order (B, E, A, ...).

    A key never carries both sharps and flats.
    """

    key_id: str
    sharps: tuple[str, ...] = ()
    flats: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.sharps and self.flats:
            raise ValueError(f"Key '{self.key_id}' cannot have both sharps and flats.")
        if self.sharps != SHARP_ORDER[: len(self.sharps)]:
            raise ValueError(f"Key '{self.key_id}' sharps are out of order: {self.sharps}.")
        if self.flats != FLAT_ORDER[: len(self.flats)]:
            raise ValueError(f"Key '{self.key_id}' flats are out of order: {self.flats}.")

    def accidental_for(self, letter: str) -> Accidental:
        """Return the accidental this key applies to a natural letter."""
        if letter in self.sharps:
            return Accidental.SHARP
        if letter in self.flats:
            return Accidental.FLAT
        return Accidental.NATURAL


def _sharp_key(key_id: str, count: int) -> KeySignature:
    return KeySignature(key_id=key_id, sharps=SHARP_ORDER[:count])


def _flat_key(key_id: str, count: int) -> KeySignature:
    return KeySignature(key_id=key_id, flats=FLAT_ORDER[:count])


# ── Catalog ─────────────────────────────────────────────────────────────────

KEY_SIGNATURES: Final[dict[str, KeySignature]] = {
    key.key_id: key
    for key in (
        KeySignature(key_id="C"),
        _sharp_key("G", 1),
        _sharp_key("D", 2),
        _sharp_key("A", 3),
        _sharp_key("E", 4),
        _flat_key("F", 1),
        _flat_key("Bb", 2),
        _flat_key("Eb", 3),
        _flat_key("Ab", 4),
    )
}

DEFAULT_KEY: Final[str] = "C"


def get_key_signature(key_id: str) -> KeySignature:
    """
    Look up a key signature by its catalog id.

    Raises:
        UnknownKeySignatureError: If ``key_id`` is not one of the catalog keys.
    """
    try:
        return KEY_SIGNATURES[key_id]
    except KeyError:
        supported = ", ".join(KEY_SIGNATURES)
        raise UnknownKeySignatureError(
            f"Unknown key signature '{key_id}'. Use one of: {supported}."
        ) from None
