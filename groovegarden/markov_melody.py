import random
import typing


ContextKey = typing.Tuple[int, ...]


def choose_weighted (options: typing.Dict[int, int], rng: random.Random) -> int:

	"""
	Choose one key from an insertion-ordered ``{value: count}`` mapping.

	Draws an integer in ``[0, total)`` and returns the first option whose
	running total exceeds it.
	"""

	if not options:
		raise ValueError("Options cannot be empty")

	total_weight = 0

	for weight in options.values():
		if weight <= 0:
			raise ValueError("Weights must be positive")
		total_weight += weight

	roll = rng.randrange(total_weight)
	accum = 0

	for option, weight in options.items():
		accum += weight
		if roll < accum:
			return option

	return next(reversed(options))


class MarkovMelody:

	"""
	An order-N Markov model over scale-degree sequences.

	The transition table is learned from the degree sequence passed to
	``set_scale_degrees`` and rebuilt whenever the sequence or the order
	changes.  Contexts that are too short or were never seen fall back to a
	uniform choice over the degree set.
	"""

	def __init__ (self, order: int = 2, rng: typing.Optional[random.Random] = None) -> None:

		"""
		Initialize an empty model of the given order.
		"""

		if order < 1:
			raise ValueError(f"Markov order must be at least 1 (got {order})")

		self.order = order
		self.rng = rng or random.Random()
		self.scale_degrees: typing.List[int] = []
		self.transitions: typing.Dict[ContextKey, typing.Dict[int, int]] = {}


	def set_scale_degrees (self, degrees: typing.Sequence[int]) -> None:

		"""
		Replace the degree sequence and rebuild the transition table.
		"""

		self.scale_degrees = list(degrees)
		self._build_transitions()


	def set_order (self, order: int) -> None:

		"""
		Change the context length and rebuild the transition table.
		"""

		if order < 1:
			raise ValueError(f"Markov order must be at least 1 (got {order})")

		self.order = order
		self._build_transitions()


	def _build_transitions (self) -> None:

		"""Count every ``order``-length context and the degree that follows it."""

		self.transitions = {}

		if len(self.scale_degrees) < self.order + 1:
			return

		for i in range(len(self.scale_degrees) - self.order):
			context = tuple(self.scale_degrees[i:i + self.order])
			next_degree = self.scale_degrees[i + self.order]

			counts = self.transitions.setdefault(context, {})
			counts[next_degree] = counts.get(next_degree, 0) + 1


	def generate_next_note (self, context: typing.Sequence[int]) -> int:

		"""
		Sample the degree that follows the most recent ``order`` items of
		``context``.

		Returns a uniformly random degree from the current set when the
		context is shorter than the order or was never observed.
		"""

		recent = list(context)

		if len(recent) < self.order:
			return self._random_degree()

		candidates = self.transitions.get(tuple(recent[-self.order:]))

		if not candidates:
			return self._random_degree()

		return choose_weighted(candidates, self.rng)


	def _random_degree (self) -> int:

		"""Uniform fallback over the degree set."""

		if not self.scale_degrees:
			raise ValueError("No scale degrees set")

		return self.rng.choice(self.scale_degrees)
