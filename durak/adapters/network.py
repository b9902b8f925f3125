"""
WebSocket play for the Durak engine.

The server side holds one `NetworkPlayer` per connected client. It implements
the player interface by sending a JSON query to the client and awaiting the
reply. The client side is `NetworkClient`, which answers queries with a local
player agent such as the CLI player.

Every message is a JSON object ``{"type": ..., "data": ...}``. Queries from
the server use the player method name as type (``attack``, ``defend``,
``pile_on``, ``get_id``, ``won``, ``lost``, ``observe_move``, ``message``,
``error``); the client answers decisions with ``{"type": "response", "data":
...}``. Notifications (``observe_move``, ``message``, ``error``) get no reply.
Cards travel as their canonical index.

Queries that expect a reply carry a ``seq`` number which the client echoes in
its response. A reply to a query the engine stopped waiting for (after a
decision timeout) therefore never answers a later query.
"""

from typing import Any, Dict, List, Optional, Sequence
import asyncio
import json
import logging

from websockets.asyncio.client import connect
from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed

from durak.adapters.base import DurakPlayer
from durak.common.card import Card
from durak.errors import PlayerAgentError
from durak.game.view import Action, PlayerInfo, Ready, ToPlayState

logger = logging.getLogger("durak.adapters.network")


class MessageType:
    """Types of messages exchanged between server and client."""

    ATTACK = "attack"
    DEFEND = "defend"
    PILE_ON = "pile_on"
    GET_ID = "get_id"
    WON = "won"
    LOST = "lost"
    OBSERVE_MOVE = "observe_move"
    MESSAGE = "message"
    ERROR = "error"
    RESPONSE = "response"


def encode_message(message_type: str, data: Any = None, seq: Optional[int] = None) -> str:
    message = {"type": message_type, "data": data}
    if seq is not None:
        message["seq"] = seq
    return json.dumps(message)


def decode_message(message: Any) -> Dict[str, Any]:
    """
    Parse a message into a dict with "type" and "data" keys.

    Raises:
        ValueError: The message is not a JSON object with a "type"
    """
    if isinstance(message, bytes):
        message = message.decode("utf-8")
    data = json.loads(message)
    if not isinstance(data, dict) or "type" not in data:
        raise ValueError(f"Malformed message: {message!r}")
    data.setdefault("data", None)
    return data


class NetworkPlayer(DurakPlayer):
    """
    Server-side proxy for a player connected over a WebSocket.

    Transport and decoding failures are raised as PlayerAgentError, which
    the engine treats as fatal to the game.
    """

    def __init__(self, connection):
        """
        Initialize the network player.

        Args:
            connection: An open WebSocket connection to the client
        """
        self.connection = connection
        self.id: Optional[int] = None
        self._lock = asyncio.Lock()
        self._closed = asyncio.Event()
        self._seq = 0

    async def _send(self, message_type: str, data: Any = None, seq: Optional[int] = None) -> None:
        try:
            await self.connection.send(encode_message(message_type, data, seq))
        except (ConnectionClosed, OSError) as e:
            raise PlayerAgentError(
                f"Connection to player {self.id} lost while sending {message_type}",
                self.id,
            ) from e

    async def _request(self, message_type: str, data: Any = None) -> Any:
        """
        Send a query and return the data of the client's response.

        Responses to earlier queries, left unread because the caller stopped
        waiting for them, are discarded.
        """
        async with self._lock:
            self._seq += 1
            seq = self._seq
            await self._send(message_type, data, seq)
            while True:
                reply = await self._receive(message_type)
                if reply.get("seq") == seq:
                    return reply["data"]
                logger.warning(
                    "Discarding stale reply from player %s (seq %r, waiting for %d)",
                    self.id,
                    reply.get("seq"),
                    seq,
                )

    async def _receive(self, message_type: str) -> Dict[str, Any]:
        try:
            raw = await self.connection.recv()
        except (ConnectionClosed, OSError) as e:
            raise PlayerAgentError(
                f"Connection to player {self.id} lost while waiting for {message_type}",
                self.id,
            ) from e
        try:
            reply = decode_message(raw)
        except ValueError as e:
            raise PlayerAgentError(f"Invalid reply from player {self.id}: {e}", self.id) from e
        if reply["type"] != MessageType.RESPONSE:
            raise PlayerAgentError(
                f"Expected a response from player {self.id}, got {reply['type']!r}",
                self.id,
            )
        return reply

    def _decode(self, what: str, decoder, data: Any) -> Any:
        try:
            return decoder(data)
        except (KeyError, TypeError, ValueError) as e:
            raise PlayerAgentError(
                f"Could not decode {what} from player {self.id}: {data!r}", self.id
            ) from e

    async def attack(self, state: ToPlayState) -> Action:
        data = await self._request(MessageType.ATTACK, state.to_dict())
        return self._decode("attack", Action.from_dict, data)

    async def defend(self, state: ToPlayState) -> Action:
        data = await self._request(MessageType.DEFEND, state.to_dict())
        return self._decode("defense", Action.from_dict, data)

    async def pile_on(self, state: ToPlayState) -> List[Card]:
        data = await self._request(MessageType.PILE_ON, state.to_dict())
        return self._decode(
            "pile on", lambda d: [Card.from_index(i) for i in d], data
        )

    async def get_id(self, player_info: Sequence[PlayerInfo]) -> int:
        data = await self._request(
            MessageType.GET_ID, [info.to_dict() for info in player_info]
        )
        self.id = self._decode("id", _strict_int, data)
        return self.id

    async def observe_move(self, state: ToPlayState) -> None:
        await self._send(MessageType.OBSERVE_MOVE, state.to_dict())

    async def won(self) -> Ready:
        data = await self._request(MessageType.WON)
        return self._decode("readiness", Ready, data)

    async def lost(self) -> Ready:
        data = await self._request(MessageType.LOST)
        return self._decode("readiness", Ready, data)

    async def message(self, msg: str) -> None:
        await self._send(MessageType.MESSAGE, msg)

    async def error(self, error: str) -> None:
        await self._send(MessageType.ERROR, error)

    async def close(self) -> None:
        """Close the connection and release the server handler."""
        self._closed.set()
        await self.connection.close()

    async def wait_closed(self) -> None:
        await self._closed.wait()


def _strict_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected an integer, got {value!r}")
    return value


class DurakServer:
    """
    Accepts WebSocket connections for a networked game.

    Each accepted connection is wrapped in a NetworkPlayer and kept open until
    the player is closed. Connections beyond the expected player count are
    refused.

    Usage::

        server = DurakServer("localhost", 8765, num_players=3)
        async with server:
            players = await server.wait_for_players()
            ...
    """

    def __init__(self, host: str = "localhost", port: int = 8765, num_players: int = 2):
        self.host = host
        self.port = port
        self.num_players = num_players
        self.players: List[NetworkPlayer] = []
        self._queue: "asyncio.Queue[NetworkPlayer]" = asyncio.Queue()
        self._server = None

    async def handle_connection(self, connection) -> None:
        """Handle a WebSocket client connection."""
        if len(self.players) >= self.num_players:
            logger.warning("Refusing connection: game is full")
            await connection.close(code=1013, reason="Game is full")
            return

        player = NetworkPlayer(connection)
        self.players.append(player)
        logger.info("Player connected (%d/%d)", len(self.players), self.num_players)
        await self._queue.put(player)
        await player.wait_closed()

    async def start(self) -> None:
        self._server = await serve(self.handle_connection, self.host, self.port)
        logger.info("Durak server started on ws://%s:%s", self.host, self.port)

    async def wait_for_players(self) -> List[NetworkPlayer]:
        """Wait until the expected number of players has connected."""
        players = []
        while len(players) < self.num_players:
            players.append(await self._queue.get())
        return players

    async def stop(self) -> None:
        """Close every player connection and the server."""
        for player in self.players:
            await player.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        logger.info("Durak server stopped")

    async def __aenter__(self) -> "DurakServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


class NetworkClient:
    """
    Connects a local player agent to a Durak server.

    Every query from the server is answered by the wrapped player. The client
    stops after the game reports a win, a loss or an error.
    """

    def __init__(self, player: DurakPlayer, url: str = "ws://localhost:8765"):
        self.player = player
        self.url = url
        self.finished = False

    async def run(self) -> None:
        """Connect to the server and play until the game is over."""
        async with connect(self.url) as websocket:
            logger.info("Connected to %s", self.url)
            await self.serve(websocket)

    async def serve(self, websocket) -> None:
        while not self.finished:
            try:
                raw = await websocket.recv()
            except ConnectionClosed:
                logger.warning("Server closed the connection")
                break
            reply = await self.handle_message(raw)
            if reply is not None:
                await websocket.send(reply)

    async def handle_message(self, raw: Any) -> Optional[str]:
        """
        Dispatch one server message to the local player.

        Returns:
            The encoded reply, or None for notifications
        """
        message = decode_message(raw)
        message_type = message["type"]
        data = message["data"]
        seq = message.get("seq")
        player = self.player

        if message_type == MessageType.ATTACK:
            action = await player.attack(ToPlayState.from_dict(data))
            return encode_message(MessageType.RESPONSE, action.to_dict(), seq)
        if message_type == MessageType.DEFEND:
            action = await player.defend(ToPlayState.from_dict(data))
            return encode_message(MessageType.RESPONSE, action.to_dict(), seq)
        if message_type == MessageType.PILE_ON:
            cards = await player.pile_on(ToPlayState.from_dict(data))
            return encode_message(MessageType.RESPONSE, [card.index for card in cards], seq)
        if message_type == MessageType.GET_ID:
            player_id = await player.get_id([PlayerInfo.from_dict(d) for d in data])
            return encode_message(MessageType.RESPONSE, player_id, seq)
        if message_type in (MessageType.WON, MessageType.LOST):
            self.finished = True
            method = player.won if message_type == MessageType.WON else player.lost
            ready = await method()
            return encode_message(MessageType.RESPONSE, ready.value, seq)
        if message_type == MessageType.OBSERVE_MOVE:
            await player.observe_move(ToPlayState.from_dict(data))
            return None
        if message_type == MessageType.MESSAGE:
            await player.message(data)
            return None
        if message_type == MessageType.ERROR:
            self.finished = True
            await player.error(data)
            return None

        logger.warning("Ignoring unknown message type: %s", message_type)
        return None
