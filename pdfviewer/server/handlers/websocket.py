"""
WebSocket upgrade and message channel lifecycle.

An upgraded connection is read on the thread that accepted it. Frames are
turned into ``ChannelEvent`` values and fed to a ``MessageChannel``, which
forwards them to the viewer handler and enforces that a channel ends with
exactly one terminal event::

    OPEN -> (message)* -> CLOSED | ERRORED
"""

import enum
import json
import threading
from dataclasses import dataclass
from typing import Any, Optional

from websockets.exceptions import ConnectionClosedError
from websockets.server import ServerProtocol
from websockets.sync.connection import Connection

CLOSE_MESSAGE = json.dumps({"type": "close"})


class ChannelState(enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    ERRORED = "errored"


class EventKind(enum.Enum):
    MESSAGE = "message"
    CLOSE = "close"
    ERROR = "error"


@dataclass(frozen=True)
class ChannelEvent:
    """One event read from a connection."""
    kind: EventKind
    payload: Any = None


class MessageChannel:
    """Lifecycle of one upgraded connection."""

    def __init__(self, connection, viewer_handler, log):
        self.connection = connection
        self.viewer_handler = viewer_handler
        self.log = log
        self.state = ChannelState.OPEN

    def dispatch(self, event):
        """Forward one event. Returns False once the channel has terminated."""
        if self.state is not ChannelState.OPEN:
            return False

        if event.kind is EventKind.MESSAGE:
            try:
                self.viewer_handler(self.connection, event.payload)
            except Exception as e:
                return self.dispatch(ChannelEvent(EventKind.ERROR, e))
        elif event.kind is EventKind.CLOSE:
            self.state = ChannelState.CLOSED
            self.viewer_handler(self.connection, CLOSE_MESSAGE)
        else:
            self.state = ChannelState.ERRORED
            self.log(f"Error on WebSocket connection: {event.payload}")
        return self.state is ChannelState.OPEN

    def run(self, events):
        """Consume events until the channel reaches a terminal state."""
        for event in events:
            if not self.dispatch(event):
                break


def receive_events(connection):
    """Yield the events of ``connection``, ending with close or error."""
    try:
        for message in connection:
            yield ChannelEvent(EventKind.MESSAGE, message)
    except ConnectionClosedError as e:
        # A peer that vanished without any close frame (1006) has closed,
        # a close frame with an error code means the protocol failed.
        if e.rcvd is None and e.sent is None:
            yield ChannelEvent(EventKind.CLOSE)
        else:
            yield ChannelEvent(EventKind.ERROR, e)
        return
    except OSError as e:
        yield ChannelEvent(EventKind.ERROR, e)
        return
    yield ChannelEvent(EventKind.CLOSE)


def is_upgrade_request(handler):
    return "websocket" in handler.headers.get("Upgrade", "").lower()


def raw_request(handler):
    """Rebuild the request head already consumed by http.server."""
    lines = [handler.requestline]
    lines += [f"{name}: {value}" for name, value in handler.headers.items()]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")


class UpgradeManager:
    """Upgrades connections and tracks the live message channels."""

    def __init__(self, viewer_handler, log):
        self.viewer_handler = viewer_handler
        self.log = log
        self.channels = set()
        self._lock = threading.Lock()

    def handshake(self, handler) -> Optional[Connection]:
        """Answer the opening handshake, returning the connection on success."""
        protocol = ServerProtocol()
        protocol.receive_data(raw_request(handler))
        events = protocol.events_received()
        handler.close_connection = True

        response = protocol.accept(events[0]) if events else None
        accepted = response is not None and response.status_code == 101
        if not accepted:
            self.log(f"Rejected WebSocket upgrade on {handler.path}")
        if response is not None:
            protocol.send_response(response)
            for data in protocol.data_to_send():
                if data:
                    handler.connection.sendall(data)

        if not accepted:
            return None
        return Connection(handler.connection, protocol)

    def handle_upgrade(self, handler):
        """Upgrade the request's socket and serve it until it ends."""
        connection = self.handshake(handler)
        if connection is None:
            return

        channel = MessageChannel(connection, self.viewer_handler, self.log)
        with self._lock:
            self.channels.add(channel)
        try:
            channel.run(receive_events(connection))
        finally:
            with self._lock:
                self.channels.discard(channel)
            connection.close()

    def close_all(self):
        with self._lock:
            channels = list(self.channels)
        for channel in channels:
            channel.connection.close()
