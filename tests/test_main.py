import argparse

import mido
import pytest

import groovegarden
import groovegarden.__main__


def test_parse_cell_defaults_to_rhythm () -> None:

	"""A bare row,col activates a rhythm cell."""

	assert groovegarden.__main__.parse_cell("2,3") == (2, 3, groovegarden.Layer.RHYTHM)


@pytest.mark.parametrize("text, layer", [
	("1,1:melody", groovegarden.Layer.MELODY),
	("1,1:BOTH", groovegarden.Layer.BOTH),
	("1,1:1", groovegarden.Layer.MELODY),
])
def test_parse_cell_layers (text: str, layer: groovegarden.Layer) -> None:

	"""Layers are given by name or number."""

	assert groovegarden.__main__.parse_cell(text)[2] == layer


@pytest.mark.parametrize("text", ["1", "a,b", "1,2:drums", "1,2:7"])
def test_parse_cell_rejects_garbage (text: str) -> None:

	"""Malformed cells are argument errors."""

	with pytest.raises(argparse.ArgumentTypeError):
		groovegarden.__main__.parse_cell(text)


def test_seed_cells (recording_sink) -> None:

	"""Seeding activates each cell on the requested layer."""

	garden = groovegarden.Garden(sink=recording_sink)

	groovegarden.__main__.seed_cells(garden, [
		(0, 0, groovegarden.Layer.RHYTHM),
		(1, 1, groovegarden.Layer.BOTH),
	])

	assert garden.grid.is_active(0, 0)
	assert garden.grid.layer(1, 1) == groovegarden.Layer.BOTH


def test_export_command (tmp_path) -> None:

	"""The export command writes the configured number of bars."""

	config = tmp_path / "groove_garden.yaml"
	config.write_text("music:\n  tempo: 100\nseed: 5\n")
	out = tmp_path / "out.mid"

	groovegarden.__main__.main([
		"--config", str(config),
		"export", "--out", str(out), "--bars", "2",
		"--cells", "0,0:melody",
	])

	mid = mido.MidiFile(str(out))
	notes = [msg for msg in mid.tracks[0] if msg.type == "note_on"]
	tempo = [msg.tempo for msg in mid.tracks[0] if msg.type == "set_tempo"][0]

	assert mido.tempo2bpm(tempo) == pytest.approx(100)
	assert any(msg.channel == 0 for msg in notes)
	assert sum(1 for msg in notes if msg.channel == 1) == 8
