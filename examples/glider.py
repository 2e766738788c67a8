import logging

import groovegarden

logging.basicConfig(level=logging.INFO)

garden = groovegarden.Garden(
	tempo=118,
	scale="C Dorian",
	seed=2024
)

# A glider in the top-left corner grows into a drifting wall of hits.
for row, col in [(0, 1), (1, 2), (2, 0), (2, 1), (2, 2)]:
	garden.toggle_cell(row, col)

# Tag the leading edge so it also drives the exported melody.
garden.cycle_layer(2, 2)
garden.cycle_layer(1, 2)
garden.cycle_layer(1, 2)

def show_scores (scores: groovegarden.Scores) -> None:
	engine = garden.score_engine
	logging.info(
		f"diversity {scores.diversity:.0f}  flow {scores.flow:.0f}  harmony {scores.harmony:.0f}  "
		f"groove {engine.rhythm_autocorrelation():.2f}  motif {engine.melodic_similarity():.2f}"
	)

garden.on_event("scores", show_scores)

# Save the starting grid as an eight-bar MIDI file before it starts to grow.
garden.export("glider.mid")

garden.osc()

garden.play()
