import logging
import typing

import mido


logger = logging.getLogger(__name__)


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Select and open a MIDI output port.

	If ``device_name`` is provided, opens that port when it exists.  When it
	is omitted, the first available port is used.  Any failure is logged and
	``(None, None)`` is returned so playback can continue without a device.

	Returns:
		A tuple of ``(device_name, midi_out)`` or ``(None, None)``.
	"""

	try:
		outputs = mido.get_output_names()
		logger.info(f"Available MIDI outputs: {outputs}")

		if not outputs:
			logger.error("No MIDI output devices found.")
			return None, None

		if device_name is not None and device_name not in outputs:
			logger.error(f"MIDI output device '{device_name}' not found. Available devices: {outputs}")
			return None, None

		selected_name = device_name if device_name is not None else outputs[0]
		midi_out = mido.open_output(selected_name)
		logger.info(f"Opened MIDI output: {selected_name}")

		return selected_name, midi_out

	except Exception as e:
		logger.error(f"Failed to open MIDI output: {e}")
		return None, None


def fold_pitch (pitch: int) -> int:

	"""
	Move a pitch into the MIDI range 0-127 by whole octaves.

	High melody octaves can exceed 127; folding keeps the pitch class.
	"""

	while pitch > 127:
		pitch -= 12

	while pitch < 0:
		pitch += 12

	return pitch
