import argparse
import logging
import typing

import groovegarden.config
import groovegarden.garden
import groovegarden.grid


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_cell (text: str) -> typing.Tuple[int, int, groovegarden.grid.Layer]:

	"""
	Parse a ``row,col`` or ``row,col:layer`` cell argument.

	The layer is a name (``rhythm``, ``melody``, ``both``) or its number.
	"""

	position, _, layer_text = text.partition(":")

	try:
		row_text, col_text = position.split(",")
		row, col = int(row_text), int(col_text)
	except ValueError:
		raise argparse.ArgumentTypeError(f"Cell must look like row,col[:layer] (got '{text}')")

	if not layer_text:
		return row, col, groovegarden.grid.Layer.RHYTHM

	try:
		if layer_text.isdigit():
			layer = groovegarden.grid.Layer(int(layer_text))
		else:
			layer = groovegarden.grid.Layer[layer_text.upper()]
	except (KeyError, ValueError):
		raise argparse.ArgumentTypeError(f"Unknown layer '{layer_text}'")

	return row, col, layer


def seed_cells (garden: groovegarden.garden.Garden, cells: typing.Iterable[typing.Tuple[int, int, groovegarden.grid.Layer]]) -> None:

	"""
	Activate cells and cycle each one to its requested layer.
	"""

	for row, col, layer in cells:

		if not garden.grid.is_active(row, col):
			garden.toggle_cell(row, col)

		while garden.grid.layer(row, col) != layer:
			garden.cycle_layer(row, col)


def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="groovegarden", description="Groove Garden - algorithmic music from a growing grid")
	parser.add_argument("--config", default=groovegarden.config.DEFAULT_CONFIG_PATH, help="YAML settings file (default: groove_garden.yaml)")

	# Options shared by both commands
	cells = argparse.ArgumentParser(add_help=False)
	cells.add_argument("--cells", nargs="*", type=parse_cell, default=[], metavar="ROW,COL[:LAYER]", help="Cells to activate before starting")

	commands = parser.add_subparsers(dest="command")

	play = commands.add_parser("play", parents=[cells], help="Play live to a MIDI port until Ctrl+C")
	play.add_argument("--osc", action="store_true", help="Enable the OSC control surface")

	export = commands.add_parser("export", parents=[cells], help="Render bars to a MIDI file")
	export.add_argument("--out", default=None, help="Output file (default from settings)")
	export.add_argument("--bars", type=int, default=None, help="Number of bars (default from settings)")

	return parser


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Main entry point for the groovegarden application.
	"""

	args = build_parser().parse_args(argv)

	logger.info("Groove Garden starting...")

	settings = groovegarden.config.load_settings(args.config)
	garden = groovegarden.garden.Garden.from_settings(settings)

	seed_cells(garden, getattr(args, "cells", []))

	if args.command == "export":
		filename = args.out or settings.export_filename
		bars = args.bars or settings.export_bars
		events = garden.export(filename, bars=bars)
		logger.info(f"Exported {len(events)} notes over {bars} bars to {filename}")
		return

	if getattr(args, "osc", False):
		garden.osc(
			receive_port = settings.osc_receive_port,
			send_port = settings.osc_send_port,
			send_host = settings.osc_send_host
		)

	garden.play()


if __name__ == "__main__":
	main()
