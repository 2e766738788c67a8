import collections
import random
import unittest

import groovegarden.markov_melody


class ChooseWeightedTests (unittest.TestCase):

	"""
	Tests for the integer-weighted choice helper.
	"""

	def test_single_option_always_selected (self) -> None:

		"""
		A single option is returned for any roll.
		"""

		rng = random.Random(3)

		for _ in range(20):
			self.assertEqual(groovegarden.markov_melody.choose_weighted({4: 7}, rng), 4)


	def test_empty_options_raise (self) -> None:

		"""
		An empty mapping is rejected.
		"""

		with self.assertRaises(ValueError):
			groovegarden.markov_melody.choose_weighted({}, random.Random(1))


	def test_invalid_weight_raises (self) -> None:

		"""
		Zero or negative weights are rejected.
		"""

		with self.assertRaises(ValueError):
			groovegarden.markov_melody.choose_weighted({1: 0}, random.Random(1))


	def test_weights_shape_the_distribution (self) -> None:

		"""
		A 3:1 weighting picks the heavier option about three times as often.
		"""

		rng = random.Random(42)
		counts = collections.Counter(groovegarden.markov_melody.choose_weighted({0: 3, 1: 1}, rng) for _ in range(4000))

		self.assertGreater(counts[0], 2700)
		self.assertLess(counts[0], 3300)


class MarkovMelodyTests (unittest.TestCase):

	"""
	Tests for the order-N degree model.
	"""

	def test_transitions_built_from_degree_sequence (self) -> None:

		"""
		An ascending degree set gives one transition per context.
		"""

		model = groovegarden.markov_melody.MarkovMelody(order=2, rng=random.Random(1))
		model.set_scale_degrees([0, 1, 2, 3, 4, 5, 6])

		self.assertEqual(len(model.transitions), 5)
		self.assertEqual(model.transitions[(0, 1)], {2: 1})
		self.assertEqual(model.transitions[(4, 5)], {6: 1})


	def test_seen_context_is_deterministic (self) -> None:

		"""
		A context with a single successor always produces it.
		"""

		model = groovegarden.markov_melody.MarkovMelody(order=2, rng=random.Random(1))
		model.set_scale_degrees([0, 1, 2, 3, 4, 5, 6])

		for _ in range(10):
			self.assertEqual(model.generate_next_note([6, 2, 3]), 4)


	def test_only_the_last_order_items_matter (self) -> None:

		"""
		Longer history is cut to the most recent ``order`` degrees.
		"""

		model = groovegarden.markov_melody.MarkovMelody(order=1, rng=random.Random(1))
		model.set_scale_degrees([0, 1, 2, 3])

		self.assertEqual(model.generate_next_note(collections.deque([3, 3, 3, 0], maxlen=8)), 1)


	def test_short_context_falls_back_to_scale (self) -> None:

		"""
		A context shorter than the order draws uniformly from the degree set.
		"""

		degrees = [0, 1, 2, 3, 4, 5, 6]
		model = groovegarden.markov_melody.MarkovMelody(order=2, rng=random.Random(5))
		model.set_scale_degrees(degrees)

		seen = {model.generate_next_note([1]) for _ in range(200)}

		self.assertTrue(seen.issubset(set(degrees)))
		self.assertGreater(len(seen), 1)


	def test_unseen_context_falls_back_to_scale (self) -> None:

		"""
		A context that never appeared in training still yields a scale degree.
		"""

		degrees = [0, 1, 2, 3, 4, 5, 6]
		model = groovegarden.markov_melody.MarkovMelody(order=2, rng=random.Random(5))
		model.set_scale_degrees(degrees)

		for _ in range(50):
			self.assertIn(model.generate_next_note([6, 0]), degrees)


	def test_too_few_degrees_gives_empty_model (self) -> None:

		"""
		Fewer than order + 1 degrees leaves no transitions, only the fallback.
		"""

		model = groovegarden.markov_melody.MarkovMelody(order=3, rng=random.Random(2))
		model.set_scale_degrees([0, 1, 2])

		self.assertEqual(model.transitions, {})
		self.assertIn(model.generate_next_note([0, 1, 2]), [0, 1, 2])


	def test_no_degrees_raises (self) -> None:

		"""
		With nothing to fall back on, generation fails loudly.
		"""

		model = groovegarden.markov_melody.MarkovMelody(order=2)

		with self.assertRaises(ValueError):
			model.generate_next_note([])


	def test_set_order_rebuilds (self) -> None:

		"""
		Changing the order replaces the transition table.
		"""

		model = groovegarden.markov_melody.MarkovMelody(order=2, rng=random.Random(1))
		model.set_scale_degrees([0, 1, 2, 3])
		model.set_order(1)

		self.assertEqual(model.order, 1)
		self.assertEqual(model.transitions, {(0,): {1: 1}, (1,): {2: 1}, (2,): {3: 1}})


	def test_invalid_order_raises (self) -> None:

		"""
		Orders below one are rejected.
		"""

		with self.assertRaises(ValueError):
			groovegarden.markov_melody.MarkovMelody(order=0)

		model = groovegarden.markov_melody.MarkovMelody(order=2)

		with self.assertRaises(ValueError):
			model.set_order(0)
