"""Unit tests for SessionMidiExporter."""

import pytest

from staffpitch import midi_exporter
from staffpitch.midi_exporter import (
    TRACK_BASS,
    TRACK_TREBLE,
    SessionMidiExporter,
    midi_number,
)
from staffpitch.note_events import NoteEventTracker
from staffpitch.pitch_mapper import PitchMapper
from staffpitch.staff_models import NoteEvent, StaffLayout


class RecordingMidiFile:
    """Stands in for midiutil.MIDIFile and records the calls it receives."""

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.tempos: list[tuple] = []
        self.names: dict[int, str] = {}
        self.notes: list[dict] = []

    def addTempo(self, track: int, time: float, tempo: float) -> None:
        self.tempos.append((track, time, tempo))

    def addTrackName(self, track: int, time: float, trackName: str) -> None:
        self.names[track] = trackName

    def addNote(self, **kwargs) -> None:
        self.notes.append(kwargs)


def _session(key_id: str = "C") -> list[NoteEvent]:
    mapper = PitchMapper(StaffLayout(), key_id=key_id)
    tracker = NoteEventTracker()
    # treble A4, bass F3, treble F5
    for index, y in enumerate((127.5, 257.5, 77.5)):
        note = mapper.resolve(y)
        assert note is not None
        tracker.add(note, x=300.0, now=10_000.0 + index * 500.0)
    return tracker.events


def test_midi_number_includes_key_accidentals() -> None:
    natural = _session("C")
    sharp = _session("G")
    assert [midi_number(e) for e in natural] == [69, 53, 77]
    assert [midi_number(e) for e in sharp] == [69, 54, 78]


def test_build_splits_staves_into_tracks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(midi_exporter, "MIDIFile", RecordingMidiFile)
    midi = SessionMidiExporter(tempo=120).build(_session())

    assert midi.tempos == [(0, 0, 120)]
    assert midi.names == {TRACK_TREBLE: "Treble", TRACK_BASS: "Bass"}
    assert [n["track"] for n in midi.notes] == [TRACK_TREBLE, TRACK_BASS, TRACK_TREBLE]
    assert [n["pitch"] for n in midi.notes] == [69, 53, 77]


def test_build_converts_times_to_beats(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(midi_exporter, "MIDIFile", RecordingMidiFile)
    midi = SessionMidiExporter(tempo=60, note_duration=1.5).build(_session())

    # 500 ms apart at 60 BPM is half a beat
    assert [n["time"] for n in midi.notes] == pytest.approx([0.0, 0.5, 1.0])
    assert all(n["duration"] == pytest.approx(1.5) for n in midi.notes)
    assert all(n["volume"] == SessionMidiExporter.DEFAULT_VELOCITY for n in midi.notes)


def test_build_rejects_empty_session() -> None:
    with pytest.raises(ValueError, match="nothing to export"):
        SessionMidiExporter().build([])


def test_export_writes_standard_midi_file(tmp_path) -> None:
    out = tmp_path / "session.mid"
    SessionMidiExporter().export(_session(), str(out))

    data = out.read_bytes()
    assert data.startswith(b"MThd")
    assert data.count(b"MTrk") >= 3
