import pytest

import groovegarden.sequence_utils


def test_euclidean_pulse_count_matches_request () -> None:

	"""Every pulse count from 0 to steps produces exactly that many hits."""

	for steps in (1, 5, 8, 16):
		for pulses in range(steps + 1):
			sequence = groovegarden.sequence_utils.generate_euclidean_sequence(steps, pulses)
			assert len(sequence) == steps
			assert sum(sequence) == pulses


def test_euclidean_zero_pulses_is_all_rests () -> None:

	"""No pulses gives a silent pattern."""

	assert groovegarden.sequence_utils.generate_euclidean_sequence(16, 0) == [False] * 16


def test_euclidean_full_pulses_is_all_hits () -> None:

	"""As many pulses as steps fills every step."""

	assert groovegarden.sequence_utils.generate_euclidean_sequence(16, 16) == [True] * 16


def test_euclidean_pulses_are_clamped () -> None:

	"""Out-of-range pulse counts are clamped instead of raising."""

	assert groovegarden.sequence_utils.generate_euclidean_sequence(8, 20) == [True] * 8
	assert groovegarden.sequence_utils.generate_euclidean_sequence(8, -3) == [False] * 8


def test_euclidean_four_on_the_floor () -> None:

	"""Four pulses over 16 steps lands on every beat."""

	sequence = groovegarden.sequence_utils.generate_euclidean_sequence(16, 4)

	assert [i for i, hit in enumerate(sequence) if hit] == [0, 4, 8, 12]


def test_euclidean_front_loads_larger_buckets () -> None:

	"""Three pulses over eight steps splits into buckets of 3, 3 and 2."""

	sequence = groovegarden.sequence_utils.generate_euclidean_sequence(8, 3)

	assert sequence == [True, False, False, True, False, False, True, False]


def test_euclidean_five_over_sixteen () -> None:

	"""Remainder buckets come first: sizes 4, 3, 3, 3, 3."""

	sequence = groovegarden.sequence_utils.generate_euclidean_sequence(16, 5)

	assert [i for i, hit in enumerate(sequence) if hit] == [0, 4, 7, 10, 13]


def test_euclidean_invalid_steps_raises () -> None:

	"""Zero or negative steps are rejected."""

	with pytest.raises(ValueError):
		groovegarden.sequence_utils.generate_euclidean_sequence(0, 0)


def test_density_to_pulses_rounds_half_up () -> None:

	"""Density maps to pulses by rounding half up."""

	assert groovegarden.sequence_utils.density_to_pulses(0.5) == 4
	assert groovegarden.sequence_utils.density_to_pulses(0.0625) == 1
	assert groovegarden.sequence_utils.density_to_pulses(0.1875) == 2
	assert groovegarden.sequence_utils.density_to_pulses(1.0) == 8


def test_density_to_pulses_has_a_floor_of_one () -> None:

	"""An empty grid still produces one pulse."""

	assert groovegarden.sequence_utils.density_to_pulses(0.0) == 1
	assert groovegarden.sequence_utils.density_to_pulses(0.01) == 1
