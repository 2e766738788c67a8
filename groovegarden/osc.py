"""OSC control surface and status broadcasting.

Enable it with ``garden.osc()`` before ``garden.play()``.  The server listens
on a UDP port (default 9000) for control messages and sends status updates
to a target host/port (default 127.0.0.1:9001).

Receive Handlers
────────────────
- ``/tempo <int>``: Set tempo (60-180)
- ``/scale <string>``: Select a scale by name
- ``/toggle <row> <col>``: Toggle a grid cell
- ``/cycle <row> <col>``: Cycle an active cell's layer
- ``/clear``: Clear the grid
- ``/stop``: Stop playback and end the session

Send Events
───────────
- ``/bar <int>``: On bar change
- ``/tempo <int>``: On tempo change
- ``/scores <diversity> <flow> <harmony>``: After each score update
"""

import asyncio
import logging
import typing

import pythonosc.dispatcher
import pythonosc.osc_server
import pythonosc.udp_client

if typing.TYPE_CHECKING:
	from groovegarden.garden import Garden
	from groovegarden.score_engine import Scores


logger = logging.getLogger(__name__)


class OscServer:

	"""Async OSC server/client bound to one garden."""

	def __init__ (
		self,
		garden: "Garden",
		receive_port: int = 9000,
		send_port: int = 9001,
		send_host: str = "127.0.0.1"
	) -> None:

		self._garden = garden
		self._receive_port = receive_port
		self._send_port = send_port
		self._send_host = send_host

		self._server: typing.Optional[typing.Any] = None
		self._transport: typing.Optional[asyncio.BaseTransport] = None
		self._client: typing.Optional[pythonosc.udp_client.SimpleUDPClient] = None
		self._dispatcher = pythonosc.dispatcher.Dispatcher()

		self._dispatcher.map("/tempo", self._handle_tempo)
		self._dispatcher.map("/scale", self._handle_scale)
		self._dispatcher.map("/toggle", self._handle_toggle)
		self._dispatcher.map("/cycle", self._handle_cycle)
		self._dispatcher.map("/clear", self._handle_clear)
		self._dispatcher.map("/stop", self._handle_stop)

		garden.on_event("bar", self._send_bar)
		garden.on_event("tempo", self._send_tempo)
		garden.on_event("scores", self._send_scores)


	async def start (self) -> None:

		"""Start the OSC server and client."""

		self._client = pythonosc.udp_client.SimpleUDPClient(self._send_host, self._send_port)

		self._server = pythonosc.osc_server.AsyncIOOSCUDPServer(
			("0.0.0.0", self._receive_port),
			self._dispatcher,
			asyncio.get_running_loop()  # type: ignore[arg-type]
		)

		transport, _ = await self._server.create_serve_endpoint()
		self._transport = transport

		logger.info(f"OSC listening on :{self._receive_port}, sending to {self._send_host}:{self._send_port}")


	async def stop (self) -> None:

		"""Stop the OSC server."""

		if self._transport:
			self._transport.close()
			self._transport = None
			logger.info("OSC server stopped")

		self._client = None


	def send (self, address: str, *args: typing.Any) -> None:

		"""Send an OSC message.  Does nothing until the server has started."""

		if self._client:
			try:
				self._client.send_message(address, list(args))
			except Exception as e:
				logger.warning(f"OSC send error: {e}")


	# Outgoing status

	def _send_bar (self, bar: int) -> None:
		self.send("/bar", bar)

	def _send_tempo (self, tempo: int) -> None:
		self.send("/tempo", tempo)

	def _send_scores (self, scores: "Scores") -> None:
		self.send("/scores", scores.diversity, scores.flow, scores.harmony)


	# Handlers

	def _cell_args (self, address: str, args: typing.Tuple[typing.Any, ...]) -> typing.Optional[typing.Tuple[int, int]]:

		if len(args) < 2:
			logger.warning(f"OSC {address} needs <row> <col>")
			return None

		try:
			return int(args[0]), int(args[1])
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC cell arguments for {address}: {args}")
			return None

	def _handle_tempo (self, address: str, *args: typing.Any) -> None:
		if not args:
			return
		try:
			self._garden.set_tempo(int(args[0]))
		except (ValueError, TypeError):
			logger.warning(f"Invalid OSC tempo argument: {args[0]}")

	def _handle_scale (self, address: str, *args: typing.Any) -> None:
		if not args:
			return
		self._garden.set_scale(str(args[0]))

	def _handle_toggle (self, address: str, *args: typing.Any) -> None:
		cell = self._cell_args(address, args)
		if cell is None:
			return
		try:
			self._garden.toggle_cell(*cell)
		except ValueError as e:
			logger.warning(f"OSC toggle ignored: {e}")

	def _handle_cycle (self, address: str, *args: typing.Any) -> None:
		cell = self._cell_args(address, args)
		if cell is None:
			return
		try:
			self._garden.cycle_layer(*cell)
		except ValueError as e:
			logger.warning(f"OSC cycle ignored: {e}")

	def _handle_clear (self, address: str, *args: typing.Any) -> None:
		self._garden.clear()

	def _handle_stop (self, address: str, *args: typing.Any) -> None:
		self._garden.stop()
