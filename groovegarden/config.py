"""Settings for a Groove Garden session.

Settings come from a YAML file shaped like::

	music:
	  tempo: 120
	  scale: C Dorian
	  markov_order: 2
	score:
	  interval_ms: 1000
	midi:
	  device_name: null
	osc:
	  receive_port: 9000
	  send_port: 9001
	  send_host: 127.0.0.1
	export:
	  bars: 8
	  filename: groove_garden_export.mid
	seed: null

Every key is optional.  A missing file gives the defaults.
"""

import dataclasses
import logging
import os
import typing

import yaml

import groovegarden.constants
import groovegarden.scales


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "groove_garden.yaml"


@dataclasses.dataclass
class Settings:

	"""
	Resolved settings for one session.
	"""

	tempo: int = groovegarden.constants.DEFAULT_TEMPO
	min_tempo: int = groovegarden.constants.MIN_TEMPO
	max_tempo: int = groovegarden.constants.MAX_TEMPO
	scale: str = groovegarden.scales.DEFAULT_SCALE_NAME
	markov_order: int = 2
	score_interval: float = 1.0
	midi_device: typing.Optional[str] = None
	osc_receive_port: int = 9000
	osc_send_port: int = 9001
	osc_send_host: str = "127.0.0.1"
	export_bars: int = 8
	export_filename: str = "groove_garden_export.mid"
	seed: typing.Optional[int] = None


def _section (config: typing.Dict[str, typing.Any], name: str) -> typing.Dict[str, typing.Any]:

	section = config.get(name) or {}

	if not isinstance(section, dict):
		raise ValueError(f"Config section '{name}' must be a mapping")

	return section


def settings_from_dict (config: typing.Dict[str, typing.Any]) -> Settings:

	"""
	Build settings from a parsed config mapping, repairing out-of-range values.
	"""

	settings = Settings()

	music = _section(config, "music")
	score = _section(config, "score")
	midi = _section(config, "midi")
	osc = _section(config, "osc")
	export = _section(config, "export")

	tempo = int(music.get("tempo", settings.tempo))
	clamped = max(settings.min_tempo, min(settings.max_tempo, tempo))

	if clamped != tempo:
		logger.warning(f"Tempo {tempo} is outside {settings.min_tempo}-{settings.max_tempo} BPM - using {clamped}")

	settings.tempo = clamped

	scale = str(music.get("scale", settings.scale))

	if scale not in groovegarden.scales.SCALES:
		logger.warning(f"Unknown scale '{scale}' in config - using {settings.scale}")
	else:
		settings.scale = scale

	settings.markov_order = int(music.get("markov_order", settings.markov_order))
	settings.score_interval = float(score.get("interval_ms", settings.score_interval * 1000.0)) / 1000.0
	settings.midi_device = midi.get("device_name", settings.midi_device)
	settings.osc_receive_port = int(osc.get("receive_port", settings.osc_receive_port))
	settings.osc_send_port = int(osc.get("send_port", settings.osc_send_port))
	settings.osc_send_host = str(osc.get("send_host", settings.osc_send_host))
	settings.export_bars = int(export.get("bars", settings.export_bars))
	settings.export_filename = str(export.get("filename", settings.export_filename))

	seed = config.get("seed")
	settings.seed = int(seed) if seed is not None else None

	return settings


def load_settings (config_path: str = DEFAULT_CONFIG_PATH) -> Settings:

	"""
	Load settings from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return Settings()

	with open(config_path, 'r') as f:
		config = yaml.safe_load(f)

	if config is None:
		return Settings()

	if not isinstance(config, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	logger.info(f"Loaded config from {config_path}")

	return settings_from_dict(config)
