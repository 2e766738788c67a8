import asyncio
import logging
import random
import signal
import typing

import groovegarden.config
import groovegarden.constants
import groovegarden.exporter
import groovegarden.grid
import groovegarden.note_sink
import groovegarden.osc
import groovegarden.scales
import groovegarden.scheduler
import groovegarden.score_engine


logger = logging.getLogger(__name__)


class Garden:

	"""
	One Groove Garden session.

	The garden owns the grid, the playback scheduler, the score engine and
	the note sink, and is the single entry point for grid edits, tempo and
	scale changes, live playback and offline export.  Nothing is shared
	between sessions.

	Example:
		```python
		import groovegarden

		garden = groovegarden.Garden(tempo=110, scale="A Minor", seed=7)
		garden.toggle_cell(3, 3)
		garden.toggle_cell(3, 4)
		garden.toggle_cell(3, 5)
		garden.cycle_layer(3, 4)  # melody

		garden.export("garden.mid")
		garden.play()
		```
	"""

	def __init__ (
		self,
		output_device: typing.Optional[str] = None,
		tempo: int = groovegarden.constants.DEFAULT_TEMPO,
		scale: str = groovegarden.scales.DEFAULT_SCALE_NAME,
		seed: typing.Optional[int] = None,
		score_interval: float = 1.0,
		sink: typing.Optional[groovegarden.note_sink.NoteSink] = None,
		markov_order: int = 2
	) -> None:

		"""
		Parameters:
			output_device: MIDI output port name.  When omitted, the first
				available port is used.  Ignored when ``sink`` is given.
			tempo: Tempo in BPM (60-180).
			scale: Scale name; unknown names fall back to C Dorian.
			seed: Makes melody sampling and export repeatable.
			score_interval: Seconds between score recomputations.
			sink: Custom note sink.  The garden opens and closes a
				``MidoNoteSink`` itself when none is given.
			markov_order: Context length of the melody model.
		"""

		self._seed = seed
		melody_rng: typing.Optional[random.Random] = None
		self._export_seed: typing.Optional[int] = None

		# Child RNGs come from one master so each component gets an
		# independent, repeatable stream.
		if seed is not None:
			master = random.Random(seed)
			melody_rng = random.Random(master.randint(0, 2 ** 63))
			self._export_seed = master.randint(0, 2 ** 63)

		self.grid = groovegarden.grid.GridModel()
		active_scale = self.grid.set_scale(scale)

		self._owns_sink = sink is None
		self.sink: groovegarden.note_sink.NoteSink = sink if sink is not None else groovegarden.note_sink.MidoNoteSink(output_device)

		self.score_engine = groovegarden.score_engine.ScoreEngine(interval=score_interval, reference_scale=active_scale)

		self.scheduler = groovegarden.scheduler.PlaybackScheduler(
			grid = self.grid,
			sink = self.sink,
			tempo = tempo,
			markov_order = markov_order,
			rng = melody_rng,
			score_engine = self.score_engine
		)

		self.osc_server: typing.Optional[groovegarden.osc.OscServer] = None
		self._stop_event: typing.Optional[asyncio.Event] = None


	@classmethod
	def from_settings (cls, settings: groovegarden.config.Settings, sink: typing.Optional[groovegarden.note_sink.NoteSink] = None) -> "Garden":

		"""
		Create a garden from loaded settings.
		"""

		return cls(
			output_device = settings.midi_device,
			tempo = settings.tempo,
			scale = settings.scale,
			seed = settings.seed,
			score_interval = settings.score_interval,
			sink = sink,
			markov_order = settings.markov_order
		)


	# Grid editing

	def toggle_cell (self, row: int, col: int) -> bool:

		return self.grid.toggle_cell(row, col)


	def cycle_layer (self, row: int, col: int) -> groovegarden.grid.Layer:

		return self.grid.cycle_layer(row, col)


	def clear (self) -> None:

		self.grid.clear()


	def set_scale (self, name: str) -> groovegarden.scales.Scale:

		"""
		Select a scale for the grid, the melody model and harmony scoring.
		"""

		scale = self.scheduler.set_scale(name)
		self.score_engine.reference_scale = scale

		return scale


	@property
	def scale (self) -> groovegarden.scales.Scale:

		return self.grid.scale


	# Transport

	@property
	def tempo (self) -> int:

		return self.scheduler.tempo


	def set_tempo (self, tempo: int) -> None:

		self.scheduler.set_tempo(tempo)


	@property
	def playing (self) -> bool:

		return self.scheduler.playing


	def start (self) -> None:

		self.scheduler.start()


	def stop (self) -> None:

		"""
		Stop playback.  Inside ``play()`` this also ends the session.
		"""

		self.scheduler.stop()

		if self._stop_event is not None:
			self._stop_event.set()


	def tick (self) -> None:

		"""
		Advance playback by one step (for external clocks and tests).
		"""

		self.scheduler.tick()


	def on_event (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""
		Register a callback.

		``"scores"`` listeners receive each new ``Scores`` value; every other
		event name (``"start"``, ``"stop"``, ``"step"``, ``"bar"``,
		``"tempo"``) is a playback event.
		"""

		if event_name == "scores":
			self.score_engine.events.on(event_name, callback)
		else:
			self.scheduler.on_event(event_name, callback)


	@property
	def scores (self) -> groovegarden.score_engine.Scores:

		"""
		The latest cached scores.  Reading never triggers a computation.
		"""

		return self.score_engine.scores


	# Export

	def export (
		self,
		filename: typing.Optional[str] = None,
		bars: int = groovegarden.exporter.DEFAULT_BARS,
		tempo: typing.Optional[int] = None,
		rhythm_factor: float = groovegarden.exporter.RHYTHM_FACTOR
	) -> typing.List[groovegarden.exporter.NoteEvent]:

		"""
		Render the current grid offline and optionally save it as a MIDI file.

		Live playback state is neither read nor changed.  With a seed, each
		call produces the same rhythm draws.

		Parameters:
			filename: Output path.  When ``None`` the events are returned
				without writing a file.
			bars: Number of 16-step bars to render.
			tempo: Tempo written to the file header (defaults to the current tempo).
			rhythm_factor: Scales rhythm probability; 0 drops the drums.

		Raises:
			OSError: If the file cannot be written.
		"""

		rng = random.Random(self._export_seed) if self._export_seed is not None else None

		events = groovegarden.exporter.export(
			self.grid,
			self.scale,
			bars = bars,
			rng = rng,
			rhythm_factor = rhythm_factor
		)

		if filename is not None:
			groovegarden.exporter.write_midi(events, filename, tempo=tempo if tempo is not None else self.tempo)

		return events


	# Live session

	def osc (self, receive_port: int = 9000, send_port: int = 9001, send_host: str = "127.0.0.1") -> None:

		"""
		Enable the OSC control surface for ``play()``.
		"""

		self.osc_server = groovegarden.osc.OscServer(self, receive_port=receive_port, send_port=send_port, send_host=send_host)


	def play (self) -> None:

		"""
		Play until interrupted (Ctrl+C) or ``stop()`` is called.
		"""

		try:
			asyncio.run(self._run())

		except KeyboardInterrupt:
			pass


	async def _run (self) -> None:

		"""
		Run the scheduler and the score engine side by side until stopped.
		"""

		if self._owns_sink and isinstance(self.sink, groovegarden.note_sink.MidoNoteSink):
			self.sink.open()

		if self.osc_server is not None:
			await self.osc_server.start()

		await self.score_engine.start()

		self._stop_event = asyncio.Event()
		loop = asyncio.get_running_loop()

		for sig in (signal.SIGINT, signal.SIGTERM):
			loop.add_signal_handler(sig, self._stop_event.set)

		logger.info("Playing. Press Ctrl+C to stop.")

		playback = asyncio.create_task(self.scheduler.run())
		stop_requested = asyncio.create_task(self._stop_event.wait())

		try:
			await asyncio.wait(
				[stop_requested, playback],
				return_when = asyncio.FIRST_COMPLETED
			)

		finally:
			stop_requested.cancel()

			for sig in (signal.SIGINT, signal.SIGTERM):
				loop.remove_signal_handler(sig)

			self.scheduler.stop()

			try:
				await playback

			finally:
				await self.score_engine.stop()

				if self.osc_server is not None:
					await self.osc_server.stop()

				if self._owns_sink and isinstance(self.sink, groovegarden.note_sink.MidoNoteSink):
					self.sink.close()

				self._stop_event = None
