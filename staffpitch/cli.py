"""staffpitch CLI entry point."""

import sys
import time
from typing import Callable

import click

from staffpitch import __version__
from staffpitch.key_signatures import DEFAULT_KEY, KEY_SIGNATURES
from staffpitch.midi_exporter import SessionMidiExporter
from staffpitch.note_events import NoteEventTracker
from staffpitch.pitch_mapper import PitchMapper
from staffpitch.staff_models import ResolvedNote, StaffLayout
from staffpitch.tone_sinks import SoundDeviceSink, ToneSink, WavFileSink

_DEFAULT_LAYOUT = StaffLayout()


def _describe(note: ResolvedNote | None) -> str:
    """Format a result the way the on-page note display shows it."""
    if note is None:
        return "no match"
    return f"{note.name} ({round(note.frequency)} Hz)"


def _key_option(func: Callable) -> Callable:
    return click.option(
        "--key",
        "key_id",
        type=click.Choice(list(KEY_SIGNATURES)),
        default=DEFAULT_KEY,
        show_default=True,
        help="Active key signature.",
    )(func)


def _layout_options(func: Callable) -> Callable:
    options = [
        click.option(
            "--treble-y",
            type=float,
            default=_DEFAULT_LAYOUT.treble_y,
            show_default=True,
            help="y of the top treble staff line.",
        ),
        click.option(
            "--bass-y",
            type=float,
            default=_DEFAULT_LAYOUT.bass_y,
            show_default=True,
            help="y of the top bass staff line.",
        ),
        click.option(
            "--line-spacing",
            type=click.FloatRange(min=0, min_open=True),
            default=_DEFAULT_LAYOUT.line_spacing,
            show_default=True,
            help="Pixels between adjacent staff lines.",
        ),
        click.option(
            "--x",
            "tap_x",
            type=float,
            default=None,
            metavar="X",
            help="Horizontal tap position; taps outside the staff lines are ignored.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_mapper(key_id: str, treble_y: float, bass_y: float, line_spacing: float) -> PitchMapper:
    return PitchMapper(
        StaffLayout(treble_y=treble_y, bass_y=bass_y, line_spacing=line_spacing),
        key_id=key_id,
    )


def _resolve_tap(mapper: PitchMapper, y: float, tap_x: float | None) -> ResolvedNote | None:
    layout = mapper.layout
    if tap_x is not None and layout is not None and not layout.contains_x(tap_x):
        return None
    return mapper.resolve(y)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="staffpitch")
def main() -> None:
    """staffpitch — tap a grand staff, hear the note."""


# ── keys subcommand ────────────────────────────────────────────────────────────

@main.command()
def keys() -> None:
    """List the available key signatures."""
    for key in KEY_SIGNATURES.values():
        if key.sharps:
            detail = "sharps: " + " ".join(key.sharps)
        elif key.flats:
            detail = "flats: " + " ".join(key.flats)
        else:
            detail = "no accidentals"
        click.echo(f"{key.key_id:<3} {detail}")


# ── labels subcommand ──────────────────────────────────────────────────────────

@main.command()
@_key_option
def labels(key_id: str) -> None:
    """Print the on-staff note labels under a key signature."""
    mapper = PitchMapper(key_id=key_id)
    for (letter, octave), label in mapper.note_labels().items():
        click.echo(f"{letter}{octave:<2} {label}")


# ── resolve subcommand ─────────────────────────────────────────────────────────

@main.command()
@click.argument("ys", nargs=-1, required=True, type=float, metavar="Y...")
@_key_option
@_layout_options
def resolve(
    ys: tuple[float, ...],
    key_id: str,
    treble_y: float,
    bass_y: float,
    line_spacing: float,
    tap_x: float | None,
) -> None:
    """
    Resolve vertical tap positions to notes.

    \b
    Examples:
      staffpitch resolve 128
      staffpitch resolve 150 185 --key G
    """
    try:
        mapper = _build_mapper(key_id, treble_y, bass_y, line_spacing)
    except ValueError as exc:
        click.echo(f"  ERROR: Invalid layout — {exc}", err=True)
        sys.exit(1)

    for y in ys:
        click.echo(f"{y:8.2f}  {_describe(_resolve_tap(mapper, y, tap_x))}")


# ── play subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("ys", nargs=-1, required=True, type=float, metavar="Y...")
@_key_option
@_layout_options
@click.option(
    "--wav",
    default=None,
    metavar="PATH",
    help="Write tones to WAV files instead of the audio device.",
)
@click.option(
    "--export-midi",
    default=None,
    metavar="PATH",
    help="Write the tapped notes to a MIDI file.",
)
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=SessionMidiExporter.DEFAULT_TEMPO,
    show_default=True,
    help="Tempo of the exported MIDI file in BPM.",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0),
    default=0.5,
    show_default=True,
    metavar="SECS",
    help="Time between successive taps.",
)
def play(
    ys: tuple[float, ...],
    key_id: str,
    treble_y: float,
    bass_y: float,
    line_spacing: float,
    tap_x: float | None,
    wav: str | None,
    export_midi: str | None,
    tempo: int,
    interval: float,
) -> None:
    """
    Resolve taps, play their tones, and optionally export the session.

    \b
    Examples:
      staffpitch play 128 118 108
      staffpitch play 150 185 --key G --wav tone.wav
      staffpitch play 128 118 --export-midi session.mid --interval 0
    """
    try:
        mapper = _build_mapper(key_id, treble_y, bass_y, line_spacing)
    except ValueError as exc:
        click.echo(f"  ERROR: Invalid layout — {exc}", err=True)
        sys.exit(1)

    sink: ToneSink = WavFileSink(wav) if wav is not None else SoundDeviceSink()
    tracker = NoteEventTracker()
    layout = mapper.layout or _DEFAULT_LAYOUT
    x = tap_x if tap_x is not None else layout.staff_x + layout.staff_width / 2

    click.echo(f"staffpitch v{__version__}")
    click.echo(f"  Key    : {key_id}")
    click.echo()

    for index, y in enumerate(ys):
        note = _resolve_tap(mapper, y, tap_x)
        click.echo(f"{y:8.2f}  {_describe(note)}")
        if note is None:
            continue

        # Timestamps follow --interval so the export reflects the tap rhythm
        tracker.add(note, x, now=index * interval * 1000.0)
        try:
            written = sink.play(note.frequency)
        except OSError as exc:
            click.echo(f"  ERROR: Could not output tone — {exc}", err=True)
            sys.exit(1)
        if written:
            click.echo(f"          → '{written}'")
        if wav is None and interval > 0 and index < len(ys) - 1:
            time.sleep(interval)

    if isinstance(sink, SoundDeviceSink):
        try:
            sink.wait()
        except OSError as exc:
            click.echo(f"  ERROR: Could not output tone — {exc}", err=True)
            sys.exit(1)

    if export_midi is not None:
        exporter = SessionMidiExporter(tempo=tempo)
        try:
            exporter.export(tracker.events, export_midi)
        except ValueError as exc:
            click.echo(f"  ERROR: Could not export session — {exc}", err=True)
            sys.exit(1)
        except OSError as exc:
            click.echo(f"  ERROR: Could not write MIDI file — {exc}", err=True)
            sys.exit(1)
        click.echo()
        click.echo(f"Done!  Session written to '{export_midi}'.")
