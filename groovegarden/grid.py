import enum
import logging
import typing

import groovegarden.automaton
import groovegarden.constants
import groovegarden.scales


logger = logging.getLogger(__name__)


class Layer (enum.IntEnum):

	"""Which voice an active cell feeds."""

	RHYTHM = 0
	MELODY = 1
	BOTH = 2


class GridModel:

	"""
	The square activity grid that drives generation.

	Each cell is active or inactive and carries a ``Layer`` tag that only
	matters while it is active; switching a cell off resets its tag to
	``Layer.RHYTHM``.  The grid owns a ``CellularAutomaton`` and grows
	through ``evolve()``: cells born by the automaton switch on, but cells
	the rule would kill are left alone.  Only ``toggle_cell`` and ``clear``
	ever switch a cell off.
	"""

	def __init__ (self, size: int = groovegarden.constants.GRID_SIZE) -> None:

		"""
		Create an empty grid with every cell inactive.
		"""

		self.size = size
		self._active: typing.List[typing.List[bool]] = [[False] * size for _ in range(size)]
		self._layers: typing.List[typing.List[Layer]] = [[Layer.RHYTHM] * size for _ in range(size)]
		self._automaton = groovegarden.automaton.CellularAutomaton(size)
		self.scale_name = groovegarden.scales.DEFAULT_SCALE_NAME


	def _check_bounds (self, row: int, col: int) -> None:

		if not (0 <= row < self.size and 0 <= col < self.size):
			raise ValueError(f"Cell ({row}, {col}) is outside the {self.size}x{self.size} grid")


	def is_active (self, row: int, col: int) -> bool:

		self._check_bounds(row, col)
		return self._active[row][col]


	def layer (self, row: int, col: int) -> Layer:

		self._check_bounds(row, col)
		return self._layers[row][col]


	def toggle_cell (self, row: int, col: int) -> bool:

		"""
		Flip a cell on or off and return its new state.
		"""

		self._check_bounds(row, col)

		active = not self._active[row][col]
		self._active[row][col] = active

		if not active:
			self._layers[row][col] = Layer.RHYTHM

		return active


	def cycle_layer (self, row: int, col: int) -> Layer:

		"""
		Advance an active cell's layer (rhythm → melody → both → rhythm).

		Inactive cells are left unchanged.
		"""

		self._check_bounds(row, col)

		if self._active[row][col]:
			self._layers[row][col] = Layer((self._layers[row][col] + 1) % len(Layer))

		return self._layers[row][col]


	def set_scale (self, name: str) -> groovegarden.scales.Scale:

		"""
		Select the active scale by name and return it (unknown names fall back).
		"""

		scale = groovegarden.scales.get_scale(name)
		self.scale_name = scale.name
		return scale


	@property
	def scale (self) -> groovegarden.scales.Scale:

		return groovegarden.scales.get_scale(self.scale_name)


	def evolve (self) -> int:

		"""
		Run one automaton generation and merge births into the grid.

		Returns the number of newly activated cells.
		"""

		generation = self._automaton.step(self._active)
		born = 0

		for row in range(self.size):
			for col in range(self.size):
				if generation[row][col] and not self._active[row][col]:
					self._active[row][col] = True
					born += 1

		if born:
			logger.debug(f"Automaton activated {born} cell(s)")

		return born


	def active_cells (self) -> typing.List[typing.List[bool]]:

		"""A copy of the activity matrix."""

		return [list(row) for row in self._active]


	def layers (self) -> typing.List[typing.List[Layer]]:

		"""A copy of the layer matrix."""

		return [list(row) for row in self._layers]


	def active_count (self) -> int:

		return sum(sum(1 for cell in row if cell) for row in self._active)


	def density (self) -> float:

		"""Fraction of cells that are active (0.0-1.0)."""

		return self.active_count() / (self.size * self.size)


	def clear (self) -> None:

		"""
		Deactivate every cell, reset every layer and zero the automaton.
		"""

		for row in range(self.size):
			for col in range(self.size):
				self._active[row][col] = False
				self._layers[row][col] = Layer.RHYTHM

		self._automaton.clear()

		logger.info("Grid cleared")
