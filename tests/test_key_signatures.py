"""Unit tests for the key-signature catalog."""

import pytest

from staffpitch.key_signatures import (
    FLAT_ORDER,
    KEY_SIGNATURES,
    SHARP_ORDER,
    Accidental,
    KeySignature,
    UnknownKeySignatureError,
    get_key_signature,
)


def test_catalog_has_nine_keys() -> None:
    assert list(KEY_SIGNATURES) == ["C", "G", "D", "A", "E", "F", "Bb", "Eb", "Ab"]


@pytest.mark.parametrize(
    "key_id, sharps, flats",
    [
        ("C", (), ()),
        ("G", ("F",), ()),
        ("D", ("F", "C"), ()),
        ("A", ("F", "C", "G"), ()),
        ("E", ("F", "C", "G", "D"), ()),
        ("F", (), ("B",)),
        ("Bb", (), ("B", "E")),
        ("Eb", (), ("B", "E", "A")),
        ("Ab", (), ("B", "E", "A", "D")),
    ],
)
def test_catalog_accidentals(key_id: str, sharps: tuple, flats: tuple) -> None:
    key = get_key_signature(key_id)
    assert key.sharps == sharps
    assert key.flats == flats


def test_no_key_has_both_sharps_and_flats() -> None:
    for key in KEY_SIGNATURES.values():
        assert not (key.sharps and key.flats)


def test_accidental_for_letters() -> None:
    key = get_key_signature("Eb")
    assert key.accidental_for("B") is Accidental.FLAT
    assert key.accidental_for("A") is Accidental.FLAT
    assert key.accidental_for("D") is Accidental.NATURAL
    assert get_key_signature("A").accidental_for("G") is Accidental.SHARP


def test_accidental_semitones_and_glyphs() -> None:
    assert (Accidental.SHARP.glyph, Accidental.SHARP.semitones) == ("#", 1)
    assert (Accidental.FLAT.glyph, Accidental.FLAT.semitones) == ("b", -1)
    assert (Accidental.NATURAL.glyph, Accidental.NATURAL.semitones) == ("", 0)


def test_unknown_key_raises_value_error() -> None:
    with pytest.raises(UnknownKeySignatureError, match="Unknown key signature 'F#'"):
        get_key_signature("F#")
    assert issubclass(UnknownKeySignatureError, ValueError)


def test_key_with_sharps_and_flats_is_rejected() -> None:
    with pytest.raises(ValueError, match="both sharps and flats"):
        KeySignature(key_id="bad", sharps=("F",), flats=("B",))


def test_out_of_order_accidentals_are_rejected() -> None:
    with pytest.raises(ValueError, match="out of order"):
        KeySignature(key_id="bad", sharps=("C",))
    with pytest.raises(ValueError, match="out of order"):
        KeySignature(key_id="bad", flats=("E", "B"))


def test_seven_accidental_keys_are_valid() -> None:
    assert KeySignature(key_id="C#", sharps=SHARP_ORDER).accidental_for("B") is Accidental.SHARP
    assert KeySignature(key_id="Cb", flats=FLAT_ORDER).accidental_for("F") is Accidental.FLAT
