"""
Classification channel to the remote classifier.

The classifier (a browser page running the trained model) holds one
persistent connection to the sorter. The sorter emits a ``classify`` event
carrying an image reference and the classifier answers with a ``classified``
event carrying the predicted label.

There is no timeout: if the answer never arrives the future never resolves.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel, ValidationError

from blocksort.errors import ChannelBusyError

logger = logging.getLogger(__name__)

REQUEST_EVENT = "classify"
RESPONSE_EVENT = "classified"
LOG_EVENT = "log"


class EventMessage(BaseModel):
    """One event on the wire: a JSON object per line."""

    event: str
    data: Any = None


class EventTransport(Protocol):
    """Named-event duplex connection."""

    def emit(self, event: str, data: Any = None) -> None:
        ...

    def once(self, event: str, handler: Callable[[Any], None]) -> None:
        ...


class StreamTransport:
    """
    Event transport over an asyncio stream.

    Each line is a JSON encoded :class:`EventMessage`. Handlers registered with
    :meth:`once` are called for the next matching event only.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self._reader = reader
        self._writer = writer
        self._once: Dict[str, List[Callable[[Any], None]]] = defaultdict(list)
        self._reader_task: Optional[asyncio.Task] = None
        self._server: Optional[asyncio.AbstractServer] = None

    @classmethod
    async def accept(cls, host: str = "0.0.0.0", port: int = 3000) -> "StreamTransport":
        """
        Listen for the remote classifier and bind the first connection.

        Args:
            host: Interface to listen on
            port: TCP port

        Returns:
            Started transport
        """
        loop = asyncio.get_running_loop()
        connected = loop.create_future()

        async def on_connect(reader, writer):
            if connected.done():
                logger.warning("Classifier already connected, refusing extra client")
                writer.close()
                return
            connected.set_result(cls(reader, writer))

        server = await asyncio.start_server(on_connect, host, port)
        logger.info(f"Waiting for the classifier to connect on {host}:{port}")

        transport = await connected
        transport._server = server
        transport.start()
        logger.info("Classifier connected")
        return transport

    def start(self):
        """Start dispatching incoming events."""
        if self._reader_task is None:
            self._reader_task = asyncio.ensure_future(self._read_loop())
            self._reader_task.add_done_callback(self._reader_done)

    @staticmethod
    def _reader_done(task: asyncio.Task):
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Classifier reader stopped: {task.exception()!r}")

    def emit(self, event: str, data: Any = None) -> None:
        if self._writer.is_closing():
            return
        line = EventMessage(event=event, data=data).model_dump_json() + "\n"
        self._writer.write(line.encode("utf-8"))

    def once(self, event: str, handler: Callable[[Any], None]) -> None:
        self._once[event].append(handler)

    def dispatch(self, message: EventMessage):
        """Call and discard the handlers waiting for this event."""
        handlers = self._once.pop(message.event, [])
        if not handlers:
            logger.debug(f"No handler for event {message.event!r}")
        for handler in handlers:
            handler(message.data)

    async def _read_loop(self):
        while True:
            try:
                line = await self._reader.readline()
            except ValueError as e:
                # Line longer than the stream limit; readline has already
                # dropped it, or the tail arrives next and fails validation
                logger.warning(f"Ignoring oversized message: {e}")
                continue
            except ConnectionError as e:
                logger.warning(f"Classifier disconnected: {e}")
                break

            if not line:
                logger.warning("Classifier disconnected")
                break
            if not line.strip():
                continue

            try:
                message = EventMessage.model_validate_json(line)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed message {line!r}: {e}")
                continue

            self.dispatch(message)

    async def close(self):
        if self._reader_task is not None:
            self._reader_task.cancel()
        self._writer.close()
        await self._writer.wait_closed()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()


class ClassificationChannel:
    """Request/response classification over an event transport."""

    def __init__(self, transport: EventTransport):
        """
        Initialize channel.

        Args:
            transport: Connection to the remote classifier
        """
        self.transport = transport
        self.requests_sent = 0
        self._pending: Optional[asyncio.Future] = None

    @property
    def busy(self) -> bool:
        """True while a request is waiting for its answer."""
        return self._pending is not None and not self._pending.done()

    def classify(self, image_ref: str) -> asyncio.Future:
        """
        Ask the remote classifier to classify an image.

        Args:
            image_ref: Reference the classifier can load the image from

        Returns:
            Future resolving with the label as received (str or number)

        Raises:
            ChannelBusyError: If a request is already outstanding
        """
        if self.busy:
            raise ChannelBusyError("A classification request is already outstanding")

        future = asyncio.get_running_loop().create_future()

        def on_classified(data):
            if not future.done():
                future.set_result(data)

        self.transport.once(RESPONSE_EVENT, on_classified)
        self.transport.emit(REQUEST_EVENT, image_ref)

        self._pending = future
        self.requests_sent += 1
        logger.debug(f"Sent classification request for {image_ref}")
        return future

    def abandon(self):
        """
        Give up on the outstanding request, if any.

        The pending future is cancelled so the next :meth:`classify` can go
        out. A late answer to the abandoned request is still consumed by the
        next request's handler, since replies carry no request identity.
        """
        if self.busy:
            self._pending.cancel()
            logger.warning("Abandoned outstanding classification request")
        self._pending = None
