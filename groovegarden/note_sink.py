import logging
import typing

import mido

import groovegarden.constants
import groovegarden.midi_utils


logger = logging.getLogger(__name__)


@typing.runtime_checkable
class NoteSink (typing.Protocol):

	"""
	Anything that can receive symbolic note events.
	"""

	def note_on (self, channel: int, pitch: int, velocity: int) -> None:
		...

	def note_off (self, channel: int, pitch: int) -> None:
		...

	def all_notes_off (self) -> None:
		...


class MidoNoteSink:

	"""
	Sends note events to a MIDI output port through mido.

	When no port can be opened the sink stays silent, so playback and scoring
	carry on without a device.
	"""

	def __init__ (self, device_name: typing.Optional[str] = None) -> None:

		self.device_name = device_name
		self.midi_out: typing.Optional[typing.Any] = None


	def open (self) -> bool:

		"""
		Open the output port and send the instrument program changes.

		Returns True when a port was opened.
		"""

		device_name, midi_out = groovegarden.midi_utils.select_output_device(self.device_name)

		if midi_out is None:
			logger.warning("No MIDI output - note events will be discarded")
			return False

		self.device_name = device_name
		self.midi_out = midi_out

		self._send(mido.Message('program_change', channel=groovegarden.constants.MELODY_CHANNEL, program=groovegarden.constants.MELODY_PROGRAM))
		self._send(mido.Message('program_change', channel=groovegarden.constants.BASS_CHANNEL, program=groovegarden.constants.BASS_PROGRAM))

		return True


	def close (self) -> None:

		if self.midi_out is not None:
			self.midi_out.close()
			self.midi_out = None
			logger.info(f"Closed MIDI output: {self.device_name}")


	def _send (self, message: mido.Message) -> None:

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


	def note_on (self, channel: int, pitch: int, velocity: int) -> None:

		self._send(mido.Message('note_on', channel=channel, note=groovegarden.midi_utils.fold_pitch(pitch), velocity=velocity))


	def note_off (self, channel: int, pitch: int) -> None:

		self._send(mido.Message('note_off', channel=channel, note=groovegarden.midi_utils.fold_pitch(pitch), velocity=0))


	def all_notes_off (self) -> None:

		"""
		Send "All Notes Off" (CC 123) and "All Sound Off" (CC 120) on all 16 channels.
		"""

		for channel in range(16):
			self._send(mido.Message('control_change', channel=channel, control=123, value=0))
			self._send(mido.Message('control_change', channel=channel, control=120, value=0))


class RecordingNoteSink:

	"""
	Keeps every note event in memory as ``(kind, channel, pitch, velocity)``.

	Useful for headless runs and for checking what the scheduler emitted.
	"""

	def __init__ (self) -> None:

		self.events: typing.List[typing.Tuple[str, int, int, int]] = []


	def note_on (self, channel: int, pitch: int, velocity: int) -> None:

		self.events.append(("note_on", channel, pitch, velocity))


	def note_off (self, channel: int, pitch: int) -> None:

		self.events.append(("note_off", channel, pitch, 0))


	def all_notes_off (self) -> None:

		self.events.append(("all_notes_off", -1, -1, 0))


	def notes_on (self, channel: typing.Optional[int] = None) -> typing.List[typing.Tuple[int, int, int]]:

		"""Return ``(channel, pitch, velocity)`` for every note-on, optionally filtered by channel."""

		return [
			(ch, pitch, velocity)
			for kind, ch, pitch, velocity in self.events
			if kind == "note_on" and (channel is None or ch == channel)
		]


	def clear (self) -> None:

		self.events.clear()
