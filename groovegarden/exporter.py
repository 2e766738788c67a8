import dataclasses
import logging
import random
import typing

import mido

import groovegarden.constants
import groovegarden.constants.gm_drums
import groovegarden.constants.velocity
import groovegarden.grid
import groovegarden.midi_utils
import groovegarden.scales


logger = logging.getLogger(__name__)

DEFAULT_BARS = 8
RHYTHM_FACTOR = 0.8

# Note lengths in ticks (480 per beat)
KICK_TICKS = 120
SNARE_TICKS = 120
HI_HAT_TICKS = 60
MELODY_TICKS = 240
BASS_TICKS = 480


@dataclasses.dataclass (frozen=True, order=True)
class NoteEvent:

	"""
	One exported note: ``(channel, pitch, velocity, on_tick, off_tick)``.
	"""

	channel: int
	pitch: int
	velocity: int
	on_tick: int
	off_tick: int


def _note (channel: int, pitch: int, velocity: int, tick: int, duration: int) -> NoteEvent:

	return NoteEvent(channel=channel, pitch=pitch, velocity=velocity, on_tick=tick, off_tick=tick + duration)


def export (
	grid: groovegarden.grid.GridModel,
	scale: groovegarden.scales.Scale,
	bars: int = DEFAULT_BARS,
	steps_per_bar: int = groovegarden.constants.STEPS_PER_BAR,
	rng: typing.Optional[random.Random] = None,
	rhythm_factor: float = RHYTHM_FACTOR
) -> typing.List[NoteEvent]:

	"""
	Render a fixed-length timeline from a grid and scale.

	Independent of live playback: counters start at bar 0, step 0 and the
	grid is only read.  For each step, in order:

	- **Rhythm** plays when a uniform draw falls below
	  ``density * rhythm_factor`` (kick on the beat, snare on the "and",
	  hi-hat on every played step).  Pass a seeded ``rng`` for repeatable
	  output or ``rhythm_factor=0`` to drop the rhythm entirely.
	- **Melody** reads cell ``(step % size, bar % size)``; an active cell
	  tagged melody or both plays degree ``row % scale.size``.
	- **Bass** walks the scale on every beat, regardless of the grid.

	Returns the events ordered by onset.
	"""

	if bars < 1:
		raise ValueError(f"Bars must be positive (got {bars})")

	if steps_per_bar < 1:
		raise ValueError(f"Steps per bar must be positive (got {steps_per_bar})")

	rng = rng or random.Random()
	density = grid.density()
	size = grid.size
	active = grid.active_cells()
	layers = grid.layers()
	events: typing.List[NoteEvent] = []

	for bar in range(bars):
		for step in range(steps_per_bar):

			tick = (bar * steps_per_bar + step) * groovegarden.constants.TICKS_PER_STEP

			if rng.random() < density * rhythm_factor:
				events.extend(_rhythm_notes(step, tick))

			row = step % size
			col = bar % size

			if active[row][col] and layers[row][col] in (groovegarden.grid.Layer.MELODY, groovegarden.grid.Layer.BOTH):
				pitch = scale.note(row % scale.size, groovegarden.constants.MELODY_BASE_OCTAVE + col // 8)
				events.append(_note(groovegarden.constants.MELODY_CHANNEL, pitch, groovegarden.constants.velocity.MELODY_VELOCITY, tick, MELODY_TICKS))

			if step % 4 == 0:
				degree = (bar + step // 4) % scale.size
				pitch = scale.note(degree, groovegarden.constants.BASS_OCTAVE)
				events.append(_note(groovegarden.constants.BASS_CHANNEL, pitch, groovegarden.constants.velocity.BASS_VELOCITY, tick, BASS_TICKS))

	logger.debug(f"Exported {len(events)} notes over {bars} bars")

	return events


def _rhythm_notes (step: int, tick: int) -> typing.List[NoteEvent]:

	channel = groovegarden.constants.DRUM_CHANNEL
	notes: typing.List[NoteEvent] = []

	if step % 4 == 0:
		notes.append(_note(channel, groovegarden.constants.gm_drums.KICK_1, groovegarden.constants.velocity.KICK_VELOCITY, tick, KICK_TICKS))

	if step % 4 == 2:
		notes.append(_note(channel, groovegarden.constants.gm_drums.SNARE_1, groovegarden.constants.velocity.SNARE_VELOCITY, tick, SNARE_TICKS))

	notes.append(_note(channel, groovegarden.constants.gm_drums.HI_HAT_CLOSED, groovegarden.constants.velocity.HI_HAT_VELOCITY, tick, HI_HAT_TICKS))

	return notes


def to_midi_file (events: typing.Iterable[NoteEvent], tempo: float = groovegarden.constants.DEFAULT_TEMPO) -> mido.MidiFile:

	"""
	Build a single-track type 1 MIDI file with a tempo event at its head.

	Tempo only affects playback speed; event ticks are independent of it.
	"""

	mid = mido.MidiFile(type=1, ticks_per_beat=groovegarden.constants.TICKS_PER_BEAT)
	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(tempo), time=0))

	# (tick, 0 = off / 1 = on, message) so note-offs precede note-ons at the same tick
	timeline: typing.List[typing.Tuple[int, int, mido.Message]] = []

	for event in events:
		timeline.append((event.on_tick, 1, mido.Message('note_on', channel=event.channel, note=groovegarden.midi_utils.fold_pitch(event.pitch), velocity=event.velocity)))
		timeline.append((event.off_tick, 0, mido.Message('note_off', channel=event.channel, note=groovegarden.midi_utils.fold_pitch(event.pitch), velocity=0)))

	timeline.sort(key=lambda item: (item[0], item[1]))

	last_tick = 0

	for tick, _, message in timeline:
		message.time = tick - last_tick
		track.append(message)
		last_tick = tick

	return mid


def write_midi (events: typing.Iterable[NoteEvent], filename: str, tempo: float = groovegarden.constants.DEFAULT_TEMPO) -> None:

	"""
	Save exported events as a standard MIDI file.

	Raises ``OSError`` (after logging it) when the file cannot be written.
	"""

	mid = to_midi_file(events, tempo)

	try:
		mid.save(filename)
	except OSError as e:
		logger.error(f"Failed to save MIDI export to {filename}: {e}")
		raise

	logger.info(f"Saved {filename}")
