import math
import typing


def generate_euclidean_sequence (steps: int, pulses: int) -> typing.List[bool]:

	"""
	Distribute pulses across steps by front-loaded bucket fill.

	The steps are split into ``pulses`` buckets; the first
	``steps % pulses`` buckets are one step longer than the rest.  Each
	bucket holds a single pulse followed by rests, and buckets are laid
	out in order.  This is not Bjorklund's rotation: the longer gaps
	always come first.

	``pulses`` is clamped to ``[0, steps]``.

	Example:
		```python
		generate_euclidean_sequence(8, 3)
		# → [True, False, False, True, False, False, True, False]
		```
	"""

	if steps < 1:
		raise ValueError(f"Steps must be positive (got {steps})")

	pulses = max(0, min(pulses, steps))

	if pulses == 0:
		return [False] * steps

	if pulses == steps:
		return [True] * steps

	bucket_size = steps // pulses
	remainder = steps % pulses
	sequence: typing.List[bool] = []

	for bucket in range(pulses):
		size = bucket_size + (1 if bucket < remainder else 0)
		sequence.append(True)
		sequence.extend([False] * (size - 1))

	return sequence


def density_to_pulses (density: float, max_pulses: int = 8) -> int:

	"""
	Map a grid density (0.0-1.0) to a pulse count, never below one.

	Rounds half up, so a half-full grid gives ``max_pulses / 2``.
	"""

	return max(1, int(math.floor(density * max_pulses + 0.5)))
