import asyncio
import collections
import dataclasses
import heapq
import itertools
import logging
import random
import time
import typing

import groovegarden.constants
import groovegarden.constants.gm_drums
import groovegarden.constants.velocity
import groovegarden.event_emitter
import groovegarden.grid
import groovegarden.markov_melody
import groovegarden.note_sink
import groovegarden.scales
import groovegarden.score_engine
import groovegarden.sequence_utils


logger = logging.getLogger(__name__)


# Note lengths in seconds
KICK_DURATION = 0.2
SNARE_DURATION = 0.2
HI_HAT_DURATION = 0.1
MELODY_DURATION = 0.3


@dataclasses.dataclass (order=True)
class PendingNoteOff:

	"""
	A note-off due at a specific clock time.
	"""

	due: float
	order: int
	channel: int = dataclasses.field(compare=False)
	pitch: int = dataclasses.field(compare=False)


def step_interval (tempo: float) -> float:

	"""Seconds per 16th note at ``tempo`` BPM."""

	return 60.0 / (tempo * groovegarden.constants.STEPS_PER_BEAT)


class PlaybackScheduler:

	"""
	The tick-driven state machine that turns grid state into note events.

	Each call to ``tick()`` plays one 16th-note step: it re-derives the
	Euclidean pattern from grid density, re-syncs the Markov model with the
	active scale, emits the drum hits for the step and exactly one melody
	note, then advances the step counter.  Every note-on schedules a
	fire-once note-off on a heap keyed by due time; the heap is drained by
	``tick()``, by ``process_note_offs()`` and by the ``run()`` driver, and is
	discarded by ``stop()``, which silences everything.

	All state changes happen on the caller's single timeline.  Sink calls
	are one-way: failures are logged and never interrupt the tick.
	"""

	def __init__ (
		self,
		grid: groovegarden.grid.GridModel,
		sink: groovegarden.note_sink.NoteSink,
		scale_name: typing.Optional[str] = None,
		tempo: int = groovegarden.constants.DEFAULT_TEMPO,
		markov_order: int = 2,
		rng: typing.Optional[random.Random] = None,
		score_engine: typing.Optional[groovegarden.score_engine.ScoreEngine] = None,
		evolve_grid: bool = True,
		clock: typing.Callable[[], float] = time.perf_counter
	) -> None:

		"""
		Parameters:
			grid: The grid read on every tick (and evolved when ``evolve_grid``).
			sink: Receives note-on, note-off and all-notes-off calls.
			scale_name: Selects a scale on the grid; unknown names fall back to
				C Dorian.  When omitted the grid's scale is kept.
			tempo: Initial tempo in BPM, 60-180.
			markov_order: Context length of the melody model.
			rng: Random source for melody sampling.
			score_engine: Optional engine fed with pitch, rhythm and bar samples.
			evolve_grid: Run one automaton generation at the start of each tick.
			clock: Monotonic time source in seconds, used for note-off timing.
		"""

		self.grid = grid
		self.sink = sink
		self.score_engine = score_engine
		self.evolve_grid = evolve_grid
		self._clock = clock

		self.playing = False
		self.current_step = 0
		self.current_bar = 0

		if scale_name is not None:
			self.grid.set_scale(scale_name)

		self.markov = groovegarden.markov_melody.MarkovMelody(order=markov_order, rng=rng)
		self.markov.set_scale_degrees(self.scale.degrees())
		self.history: typing.Deque[int] = collections.deque(maxlen=groovegarden.constants.MELODY_HISTORY_LENGTH)

		self.pulses = 1
		self.rhythm_pattern: typing.List[bool] = [False] * groovegarden.constants.STEPS_PER_BAR
		self._bar_hits: typing.List[float] = [0.0] * groovegarden.constants.STEPS_PER_BAR

		self._pending: typing.List[PendingNoteOff] = []
		self._pending_counter = itertools.count()

		self.events = groovegarden.event_emitter.EventEmitter()
		self._wakeup: typing.Optional[asyncio.Event] = None

		self.tempo = groovegarden.constants.DEFAULT_TEMPO
		self.tick_interval = step_interval(self.tempo)
		self._last_tick_time = 0.0
		self._next_tick_time = 0.0

		self.set_tempo(tempo)


	def on_event (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""
		Register a callback for ``"start"``, ``"stop"``, ``"step"``, ``"bar"`` or ``"tempo"``.
		"""

		self.events.on(event_name, callback)


	def set_tempo (self, tempo: int) -> None:

		"""
		Change the tempo without moving the playback position.

		While playing, the next tick is re-anchored to the last tick plus the
		new interval.
		"""

		if not groovegarden.constants.MIN_TEMPO <= tempo <= groovegarden.constants.MAX_TEMPO:
			raise ValueError(
				f"Tempo must be between {groovegarden.constants.MIN_TEMPO} and "
				f"{groovegarden.constants.MAX_TEMPO} BPM (got {tempo})"
			)

		self.tempo = int(tempo)
		self.tick_interval = step_interval(self.tempo)

		if self.playing:
			self._next_tick_time = self._last_tick_time + self.tick_interval

		if self._wakeup is not None:
			self._wakeup.set()

		logger.info(f"Tempo set to {self.tempo} BPM ({self.tick_interval * 1000:.1f} ms per step)")

		self.events.emit("tempo", self.tempo)


	def set_scale (self, name: str) -> groovegarden.scales.Scale:

		"""
		Select the grid's scale and rebuild the melody model.
		"""

		scale = self.grid.set_scale(name)
		self.markov.set_scale_degrees(scale.degrees())

		logger.info(f"Scale set to {scale.name}")

		return scale


	@property
	def scale (self) -> groovegarden.scales.Scale:

		"""The active scale, owned by the grid."""

		return self.grid.scale


	def start (self) -> None:

		"""
		Enter the playing state from the top of bar 0.
		"""

		if self.playing:
			return

		self.playing = True
		self.current_step = 0
		self.current_bar = 0
		self._bar_hits = [0.0] * groovegarden.constants.STEPS_PER_BAR
		self._last_tick_time = self._clock()
		self._next_tick_time = self._last_tick_time

		logger.info("Playback started")

		self.events.emit("start")


	def stop (self) -> None:

		"""
		Stop playback, drop pending note-offs and silence every channel.
		"""

		if not self.playing:
			return

		self.playing = False
		self._pending.clear()

		logger.info("Playback stopped - sending all notes off")

		self._send(self.sink.all_notes_off)

		if self._wakeup is not None:
			self._wakeup.set()

		self.events.emit("stop")


	def _send (self, method: typing.Callable[..., None], *args: typing.Any) -> None:

		"""
		Forward a call to the sink, logging and discarding any failure.
		"""

		try:
			method(*args)
		except Exception:
			logger.exception("Note sink call failed (device may be disconnected)")


	def _note (self, channel: int, pitch: int, velocity: int, duration: float, now: float) -> None:

		"""Send a note-on and schedule its note-off ``duration`` seconds later."""

		self._send(self.sink.note_on, channel, pitch, velocity)

		heapq.heappush(self._pending, PendingNoteOff(
			due = now + duration,
			order = next(self._pending_counter),
			channel = channel,
			pitch = pitch
		))


	def process_note_offs (self, now: typing.Optional[float] = None) -> int:

		"""
		Send every note-off that is due by ``now`` and return how many were sent.
		"""

		if now is None:
			now = self._clock()

		sent = 0

		while self._pending and self._pending[0].due <= now:
			pending = heapq.heappop(self._pending)
			self._send(self.sink.note_off, pending.channel, pending.pitch)
			sent += 1

		return sent


	@property
	def pending_note_offs (self) -> int:

		return len(self._pending)


	def next_note_off_time (self) -> typing.Optional[float]:

		return self._pending[0].due if self._pending else None


	def tick (self) -> None:

		"""
		Play the current step and advance.  Does nothing while stopped.
		"""

		if not self.playing:
			return

		now = self._clock()
		self.process_note_offs(now)

		if self.evolve_grid:
			self.grid.evolve()

		self.pulses = groovegarden.sequence_utils.density_to_pulses(self.grid.density(), groovegarden.constants.MAX_PULSES)
		self.rhythm_pattern = groovegarden.sequence_utils.generate_euclidean_sequence(groovegarden.constants.STEPS_PER_BAR, self.pulses)

		scale = self.grid.scale
		self.markov.set_scale_degrees(scale.degrees())

		if self.score_engine is not None:
			self.score_engine.reference_scale = scale

		step = self.current_step
		hits = self._play_rhythm(step, now)
		pitch = self._play_melody(step, scale, now)

		self._bar_hits[step] = float(hits)

		if self.score_engine is not None:
			self.score_engine.add_rhythm(1.0 if self.rhythm_pattern[step] else 0.0)
			self.score_engine.add_pitch(pitch)

		logger.debug(f"Bar {self.current_bar} step {step}: {self.pulses} pulses, {hits} hits, melody {pitch}")

		self.events.emit("step", step, self.current_bar)

		self._advance()


	def _play_rhythm (self, step: int, now: float) -> int:

		"""Emit the drum hits for ``step`` and return how many were played."""

		if not self.rhythm_pattern[step]:
			return 0

		channel = groovegarden.constants.DRUM_CHANNEL
		hits = 0

		if step % 4 == 0:
			self._note(channel, groovegarden.constants.gm_drums.KICK_1, groovegarden.constants.velocity.KICK_VELOCITY, KICK_DURATION, now)
			hits += 1

		if step % 4 == 2:
			self._note(channel, groovegarden.constants.gm_drums.SNARE_1, groovegarden.constants.velocity.SNARE_VELOCITY, SNARE_DURATION, now)
			hits += 1

		self._note(channel, groovegarden.constants.gm_drums.HI_HAT_CLOSED, groovegarden.constants.velocity.HI_HAT_VELOCITY, HI_HAT_DURATION, now)

		return hits + 1


	def _play_melody (self, step: int, scale: groovegarden.scales.Scale, now: float) -> int:

		"""Sample one degree from the Markov model, play it and return its pitch."""

		degree = self.markov.generate_next_note(self.history)
		octave = groovegarden.constants.MELODY_BASE_OCTAVE + step // 8
		pitch = scale.note(degree, octave)

		self._note(groovegarden.constants.MELODY_CHANNEL, pitch, groovegarden.constants.velocity.MELODY_VELOCITY, MELODY_DURATION, now)
		self.history.append(degree)

		return pitch


	def _advance (self) -> None:

		self.current_step = (self.current_step + 1) % groovegarden.constants.STEPS_PER_BAR

		if self.current_step == 0:

			if self.score_engine is not None:
				self.score_engine.add_bar(self._bar_hits)

			self._bar_hits = [0.0] * groovegarden.constants.STEPS_PER_BAR
			self.current_bar += 1

			self.events.emit("bar", self.current_bar)


	async def run (self) -> None:

		"""
		Drive playback from the wall clock until ``stop()`` is called.

		Sleeps until whichever comes first, the next step or the next due
		note-off, waking early when the tempo changes or playback stops.  If
		the loop falls more than a full step behind it re-anchors rather than
		playing a burst of catch-up steps.
		"""

		wakeup = asyncio.Event()
		self._wakeup = wakeup
		self.start()

		try:
			await self._drive(wakeup)
		finally:
			self._wakeup = None


	async def _drive (self, wakeup: asyncio.Event) -> None:

		while self.playing:

			now = self._clock()

			if now >= self._next_tick_time:

				self._last_tick_time = now
				self._next_tick_time += self.tick_interval
				self.tick()

				if self._next_tick_time < now:
					logger.debug("Scheduler fell behind - re-anchoring to the clock")
					self._next_tick_time = now + self.tick_interval

			else:
				self.process_note_offs(now)

			if not self.playing:
				break

			wake_time = self._next_tick_time
			next_off = self.next_note_off_time()

			if next_off is not None and next_off < wake_time:
				wake_time = next_off

			wakeup.clear()

			try:
				await asyncio.wait_for(wakeup.wait(), timeout=max(0.0, wake_time - self._clock()))
			except asyncio.TimeoutError:
				pass
