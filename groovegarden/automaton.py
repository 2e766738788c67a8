import typing


BoolGrid = typing.List[typing.List[bool]]


class CellularAutomaton:

	"""
	Conway's Game of Life (B3/S23) on a fixed-boundary square grid.

	The automaton keeps two scratch buffers and never holds on to the grid
	it is given: ``step`` copies the input, evolves it once, and returns a
	fresh copy of the result.  Cells outside the grid count as dead.
	"""

	def __init__ (self, size: int) -> None:

		if size < 1:
			raise ValueError(f"Grid size must be positive (got {size})")

		self.size = size
		self._current: BoolGrid = [[False] * size for _ in range(size)]
		self._next: BoolGrid = [[False] * size for _ in range(size)]


	def step (self, grid: typing.Sequence[typing.Sequence[bool]]) -> BoolGrid:

		"""
		Evolve ``grid`` by one generation and return the new state.
		"""

		if len(grid) != self.size or any(len(row) != self.size for row in grid):
			raise ValueError(f"Grid must be {self.size}x{self.size}")

		for row in range(self.size):
			for col in range(self.size):
				self._current[row][col] = bool(grid[row][col])

		for row in range(self.size):
			for col in range(self.size):
				neighbours = self._count_neighbours(row, col)

				if self._current[row][col]:
					self._next[row][col] = neighbours == 2 or neighbours == 3
				else:
					self._next[row][col] = neighbours == 3

		self._current, self._next = self._next, self._current

		return self.state


	def _count_neighbours (self, row: int, col: int) -> int:

		count = 0

		for dr in (-1, 0, 1):
			for dc in (-1, 0, 1):

				if dr == 0 and dc == 0:
					continue

				r = row + dr
				c = col + dc

				if 0 <= r < self.size and 0 <= c < self.size and self._current[r][c]:
					count += 1

		return count


	@property
	def state (self) -> BoolGrid:

		"""A copy of the most recent generation."""

		return [list(row) for row in self._current]


	def clear (self) -> None:

		"""Zero both buffers."""

		for buffer in (self._current, self._next):
			for row in buffer:
				for col in range(self.size):
					row[col] = False
