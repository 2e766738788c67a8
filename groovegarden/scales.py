import dataclasses
import logging
import typing


logger = logging.getLogger(__name__)


INTERVAL_DEFINITIONS: typing.Dict[str, typing.List[int]] = {
	"dorian_mode": [0, 2, 3, 5, 7, 9, 10],
	"major_ionian": [0, 2, 4, 5, 7, 9, 11],
	"natural_minor": [0, 2, 3, 5, 7, 8, 10],
}


@dataclasses.dataclass (frozen=True)
class Scale:

	"""
	An immutable named scale rooted on a MIDI pitch.

	Degrees are zero-based indices into ``intervals``; octaves are counted
	upward from ``root``.
	"""

	name: str
	intervals: typing.Tuple[int, ...]
	root: int


	@property
	def size (self) -> int:

		"""Number of degrees in the scale."""

		return len(self.intervals)


	def note (self, degree: int, octave: int = 0) -> int:

		"""
		Return the MIDI pitch for a degree and octave.

		A degree outside the scale returns the root pitch unchanged.

		Example:
			```python
			get_scale("C Dorian").note(2, 0)  # → 63
			```
		"""

		if degree < 0 or degree >= len(self.intervals):
			return self.root

		return self.root + self.intervals[degree] + 12 * octave


	def degrees (self) -> typing.List[int]:

		"""Return every degree index of the scale, lowest first."""

		return list(range(len(self.intervals)))


	def pitch_classes (self) -> typing.List[int]:

		"""Return the pitch classes (0-11) that belong to the scale."""

		return [(self.root + i) % 12 for i in self.intervals]


	def contains (self, pitch: int) -> bool:

		"""True when the pitch's pitch class belongs to the scale."""

		return pitch % 12 in self.pitch_classes()


DEFAULT_SCALE_NAME = "C Dorian"

SCALES: typing.Dict[str, Scale] = {
	"C Dorian": Scale("C Dorian", tuple(INTERVAL_DEFINITIONS["dorian_mode"]), 60),
	"C Ionian": Scale("C Ionian", tuple(INTERVAL_DEFINITIONS["major_ionian"]), 60),
	"A Minor": Scale("A Minor", tuple(INTERVAL_DEFINITIONS["natural_minor"]), 57),
}


def get_scale (name: str) -> Scale:

	"""
	Look up a scale by name, falling back to C Dorian for unknown names.
	"""

	scale = SCALES.get(name)

	if scale is None:
		logger.warning(f"Unknown scale {name!r} - using {DEFAULT_SCALE_NAME}")
		return SCALES[DEFAULT_SCALE_NAME]

	return scale


def available_scales () -> typing.List[str]:

	"""Return the selectable scale names."""

	return list(SCALES)
