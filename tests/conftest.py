import typing

import mido
import pytest

import groovegarden.note_sink


class FakeMidiOut:

	"""MIDI output stub that keeps every message it is sent."""

	def __init__ (self, name: str = "Dummy MIDI") -> None:

		self.name = name
		self.sent: typing.List[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


# Module-level reference so tests can inspect the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI", "Other MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	fake = FakeMidiOut(name)
	_current_fake_output = fake
	return fake


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def fake_output () -> typing.Callable[[], typing.Optional[FakeMidiOut]]:

	"""Return a getter for the most recently opened fake output."""

	return lambda: _current_fake_output


@pytest.fixture
def recording_sink () -> groovegarden.note_sink.RecordingNoteSink:

	"""A fresh in-memory note sink."""

	return groovegarden.note_sink.RecordingNoteSink()


class FakeClock:

	"""A manually advanced clock for deterministic note-off timing."""

	def __init__ (self, start: float = 0.0) -> None:

		self.now = start


	def __call__ (self) -> float:

		return self.now


	def advance (self, seconds: float) -> None:

		self.now += seconds


@pytest.fixture
def clock () -> FakeClock:

	"""A fake clock starting at zero."""

	return FakeClock()
