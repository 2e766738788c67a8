"""Background scoring of generated material.

Playback pushes samples into three bounded buffers; a periodic task takes a
snapshot of each buffer, computes the diversity, flow and harmony scores and
publishes them as one immutable ``Scores`` value.  Producers only ever hold a
buffer lock for a single append and the computation never holds one at all.
"""

import asyncio
import collections
import dataclasses
import logging
import threading
import time
import typing

import groovegarden.analysis
import groovegarden.constants
import groovegarden.event_emitter
import groovegarden.scales


logger = logging.getLogger(__name__)

MAX_HISTORY = 100
MAX_BARS = 10
BAR_LENGTH = groovegarden.constants.STEPS_PER_BAR
OPTIMAL_SIMILARITY = 0.5


@dataclasses.dataclass (frozen=True)
class Scores:

	"""
	One published set of scores, each in ``[0, 100]``.
	"""

	diversity: float = 0.0
	flow: float = 0.0
	harmony: float = 0.0
	computed_at: float = 0.0


def _clamp (value: float) -> float:

	return max(0.0, min(100.0, value))


def diversity_score (pitches: typing.Sequence[float], rhythms: typing.Sequence[float]) -> float:

	"""
	Combined pitch and rhythm entropy, scaled so two bits in total reach 100.
	"""

	entropy = groovegarden.analysis.shannon_entropy(pitches) + groovegarden.analysis.shannon_entropy(rhythms)

	return _clamp(50.0 * entropy)


def flow_score (bars: typing.Sequence[typing.Sequence[float]]) -> float:

	"""
	Score how the latest bar relates to the one before it.

	Moderate similarity (around 0.5) scores highest; identical or unrelated
	bars score low.  Fewer than two bars scores 0.
	"""

	if len(bars) < 2:
		return 0.0

	similarity = groovegarden.analysis.cosine_similarity(bars[-1], bars[-2])

	return _clamp(100.0 - 200.0 * abs(similarity - OPTIMAL_SIMILARITY))


def harmony_score (pitches: typing.Sequence[float], scale: groovegarden.scales.Scale) -> float:

	"""
	Percentage of pitches inside ``scale``, plus a small bonus for a
	controlled amount of out-of-scale colour.
	"""

	if not pitches:
		return 0.0

	in_scale = sum(1 for pitch in pitches if scale.contains(int(pitch)))
	in_scale_pct = 100.0 * in_scale / len(pitches)
	bonus = min(10.0, 0.2 * (100.0 - in_scale_pct))

	return _clamp(in_scale_pct + bonus)


class _SampleBuffer:

	"""A bounded FIFO whose reads are snapshot copies."""

	def __init__ (self, capacity: int) -> None:

		self._items: typing.Deque[typing.Any] = collections.deque(maxlen=capacity)
		self._lock = threading.Lock()


	def push (self, item: typing.Any) -> None:

		with self._lock:
			self._items.append(item)


	def snapshot (self) -> typing.List[typing.Any]:

		with self._lock:
			return list(self._items)


	def __len__ (self) -> int:

		return len(self._items)


class ScoreEngine:

	"""
	Keeps bounded sample histories and a cached ``Scores`` value.

	``recompute()`` may be called from any thread; at most one computation
	runs at a time and overlapping requests return immediately.  ``start()``
	runs the periodic cycle on the event loop, executing each computation in
	the default executor, and emits a ``"scores"`` event after every
	successful cycle.
	"""

	def __init__ (
		self,
		interval: float = 1.0,
		reference_scale: typing.Optional[groovegarden.scales.Scale] = None,
		clock: typing.Callable[[], float] = time.monotonic
	) -> None:

		if interval <= 0:
			raise ValueError("Score interval must be positive")

		self.interval = interval
		self.reference_scale = reference_scale or groovegarden.scales.get_scale(groovegarden.scales.DEFAULT_SCALE_NAME)
		self._clock = clock

		self._pitches = _SampleBuffer(MAX_HISTORY)
		self._rhythms = _SampleBuffer(MAX_HISTORY)
		self._bars = _SampleBuffer(MAX_BARS)

		self._scores = Scores()
		self._computing = False
		self._compute_lock = threading.Lock()

		self.events = groovegarden.event_emitter.EventEmitter()
		self._task: typing.Optional[asyncio.Task] = None


	def add_pitch (self, pitch: float) -> None:

		self._pitches.push(float(pitch))


	def add_rhythm (self, value: float) -> None:

		self._rhythms.push(float(value))


	def add_bar (self, bar: typing.Sequence[float]) -> bool:

		"""
		Push a per-step feature vector for one bar.

		Vectors that are not exactly one bar long are ignored.  Returns True
		when the vector was accepted.
		"""

		if len(bar) != BAR_LENGTH:
			logger.debug(f"Ignoring bar vector of length {len(bar)}")
			return False

		self._bars.push(tuple(float(v) for v in bar))
		return True


	def snapshot (self) -> typing.Tuple[typing.List[float], typing.List[float], typing.List[typing.Tuple[float, ...]]]:

		"""
		Copy the pitch, rhythm and bar buffers.
		"""

		return self._pitches.snapshot(), self._rhythms.snapshot(), self._bars.snapshot()


	@property
	def scores (self) -> Scores:

		"""The most recently published scores.  Never triggers computation."""

		return self._scores


	@property
	def computing (self) -> bool:

		return self._computing


	def recompute (self) -> bool:

		"""
		Compute and publish new scores from a snapshot of the buffers.

		Returns False, leaving the cache untouched, when another computation
		is in progress or when this one fails.
		"""

		with self._compute_lock:
			if self._computing:
				return False
			self._computing = True

		try:
			pitches, rhythms, bars = self.snapshot()

			scores = Scores(
				diversity = diversity_score(pitches, rhythms),
				flow = flow_score(bars),
				harmony = harmony_score(pitches, self.reference_scale),
				computed_at = self._clock()
			)

			self._scores = scores
			return True

		except Exception as exc:
			logger.warning(f"Score computation failed - keeping previous scores: {exc}")
			return False

		finally:
			self._computing = False


	def rhythm_autocorrelation (self, lag: int = BAR_LENGTH) -> float:

		"""
		Autocorrelation of the rhythm history at ``lag`` steps (one bar by default).
		"""

		return groovegarden.analysis.autocorrelation(self._rhythms.snapshot(), lag)


	def melodic_similarity (self, window: int = BAR_LENGTH) -> float:

		"""
		DTW similarity of the latest ``window`` pitches to the ``window`` before them.

		Returns 0.0 until two full windows have been heard.
		"""

		pitches = self._pitches.snapshot()

		if window <= 0 or len(pitches) < 2 * window:
			return 0.0

		return groovegarden.analysis.dtw_similarity(pitches[-2 * window:-window], pitches[-window:])


	async def start (self) -> None:

		"""Start the periodic recomputation task."""

		if self._task is not None and not self._task.done():
			return

		self._task = asyncio.create_task(self._run())
		logger.info(f"Score engine started ({self.interval:.2f}s interval)")


	async def stop (self) -> None:

		"""Cancel the periodic task and wait for it to finish."""

		if self._task is None:
			return

		self._task.cancel()

		try:
			await self._task
		except asyncio.CancelledError:
			pass

		self._task = None
		logger.info("Score engine stopped")


	async def _run (self) -> None:

		loop = asyncio.get_running_loop()

		while True:

			updated = await loop.run_in_executor(None, self.recompute)

			if updated:
				scores = self._scores
				logger.debug(f"Scores: diversity={scores.diversity:.0f} flow={scores.flow:.0f} harmony={scores.harmony:.0f}")
				self.events.emit("scores", scores)

			await asyncio.sleep(self.interval)
