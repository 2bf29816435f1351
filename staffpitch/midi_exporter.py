"""SessionMidiExporter: writes the notes tapped during a session to a MIDI file."""

from midiutil import MIDIFile

from staffpitch.pitch_mapper import A4_MIDI, semitones_from_a4
from staffpitch.staff_models import TREBLE, NoteEvent
from staffpitch.tone_sinks import TONE_DURATION

# In midiutil Format 1 MIDI, track 0 is the conductor/tempo track.
# Tracks 1 and 2 are the data tracks rendered as staves.
TRACK_CONDUCTOR = 0  # Tempo only, never receives notes
TRACK_TREBLE = 1     # Taps on the treble staff
TRACK_BASS = 2       # Taps on the bass staff

CHANNEL_TREBLE = 0
CHANNEL_BASS = 1


def midi_number(event: NoteEvent) -> int:
    """MIDI note number of the tapped pitch, accidental included."""
    pitch = event.note.pitch
    return A4_MIDI + semitones_from_a4(pitch.letter, pitch.octave, pitch.accidental)


class SessionMidiExporter:
    """
    Writes tapped notes to a two-track MIDI file.

    Track layout (Format 1, 3 internal tracks)
    ------------------------------------------
    Track 0 — conductor track (tempo only)
    Track 1 — "Treble" — taps resolved on the treble staff
    Track 2 — "Bass"   — taps resolved on the bass staff

    Middle C can be tapped on either staff; it lands on the track of the
    staff it was tapped on.

    Timing
    ------
    Event timestamps (ms) are taken relative to the first event and converted
    to beats using: beats = seconds × (tempo / 60). Every note lasts as long
    as the synthesized tone.
    """

    DEFAULT_TEMPO = 120
    DEFAULT_VELOCITY = 80

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        velocity: int = DEFAULT_VELOCITY,
        note_duration: float = TONE_DURATION,
    ) -> None:
        """
        Args:
            tempo:         Tempo in beats per minute.
            velocity:      MIDI note-on velocity (0-127).
            note_duration: Length of each note in seconds.
        """
        self.tempo = tempo
        self.velocity = velocity
        self.note_duration = note_duration

    def _seconds_to_beats(self, seconds: float) -> float:
        return seconds * (self.tempo / 60.0)

    def build(self, events: list[NoteEvent]) -> MIDIFile:
        """
        Build the MIDI file in memory.

        Raises:
            ValueError: If ``events`` is empty.
        """
        if not events:
            raise ValueError("No notes were tapped; nothing to export.")

        midi = MIDIFile(numTracks=3, removeDuplicates=False, deinterleave=False)
        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)
        midi.addTrackName(TRACK_TREBLE, 0, "Treble")
        midi.addTrackName(TRACK_BASS, 0, "Bass")

        start_ms = min(event.created_ms for event in events)
        duration_beats = self._seconds_to_beats(self.note_duration)

        for event in events:
            on_treble = event.note.position.staff == TREBLE
            midi.addNote(
                track=TRACK_TREBLE if on_treble else TRACK_BASS,
                channel=CHANNEL_TREBLE if on_treble else CHANNEL_BASS,
                pitch=midi_number(event),
                time=self._seconds_to_beats((event.created_ms - start_ms) / 1000.0),
                duration=duration_beats,
                volume=self.velocity,
            )

        return midi

    def export(self, events: list[NoteEvent], output_path: str) -> None:
        """
        Write the session to a Standard MIDI File.

        Raises:
            ValueError: If ``events`` is empty.
            OSError: If the output file cannot be opened for writing.
        """
        midi = self.build(events)
        with open(output_path, "wb") as f:
            midi.writeFile(f)
