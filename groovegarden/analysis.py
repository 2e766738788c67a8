"""Statistics used to score generated material.

All functions are pure and accept any sequence of numbers; empty input is
never an error and yields ``0.0``.
"""

import collections
import math
import typing


def shannon_entropy (values: typing.Iterable[typing.Hashable]) -> float:

	"""
	Shannon entropy in bits of the value frequencies.

	Example:
		```python
		shannon_entropy([1, 2, 1, 2])  # → 1.0
		```
	"""

	counts = collections.Counter(values)
	total = sum(counts.values())

	if total == 0:
		return 0.0

	entropy = 0.0

	for count in counts.values():
		probability = count / total
		entropy -= probability * math.log2(probability)

	return entropy


def cosine_similarity (a: typing.Sequence[float], b: typing.Sequence[float]) -> float:

	"""
	Cosine similarity over the paired elements of the shorter sequence.

	Returns 0.0 when either side is empty or has zero magnitude.
	"""

	length = min(len(a), len(b))

	if length == 0:
		return 0.0

	dot = 0.0
	norm_a = 0.0
	norm_b = 0.0

	for x, y in zip(a[:length], b[:length]):
		dot += x * y
		norm_a += x * x
		norm_b += y * y

	if norm_a == 0.0 or norm_b == 0.0:
		return 0.0

	return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def autocorrelation (data: typing.Sequence[float], lag: int) -> float:

	"""
	Normalised autocorrelation of ``data`` at ``lag``.

	Returns 0.0 when there are not enough values or the data is constant.
	"""

	if lag < 0:
		raise ValueError(f"Lag cannot be negative (got {lag})")

	if len(data) < lag + 1:
		return 0.0

	mean = sum(data) / len(data)
	variance = sum((x - mean) ** 2 for x in data) / len(data)

	if variance == 0.0:
		return 0.0

	correlation = sum((data[i] - mean) * (data[i + lag] - mean) for i in range(len(data) - lag))

	return correlation / ((len(data) - lag) * variance)


def dtw_similarity (a: typing.Sequence[float], b: typing.Sequence[float]) -> float:

	"""
	Similarity from the dynamic time warping distance of two sequences.

	Unlike ``cosine_similarity`` the sequences may differ in length and
	drift in time.  Returns ``1 / (1 + distance)``: 1.0 for identical
	sequences, approaching 0.0 as they diverge, and 0.0 when either is empty.

	Example:
		```python
		dtw_similarity([60, 62, 64], [60, 60, 62, 64])  # → 1.0
		```
	"""

	n = len(a)
	m = len(b)

	if n == 0 or m == 0:
		return 0.0

	# Rolling rows of the cumulative cost matrix
	previous = [0.0] + [math.inf] * m

	for i in range(1, n + 1):
		current = [math.inf] * (m + 1)

		for j in range(1, m + 1):
			cost = abs(a[i - 1] - b[j - 1])
			current[j] = cost + min(previous[j], current[j - 1], previous[j - 1])

		previous = current

	return 1.0 / (1.0 + previous[m])
