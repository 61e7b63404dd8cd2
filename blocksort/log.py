"""
Process-wide log sink.

Everything under the ``blocksort`` logger goes to the console. Once the
classifier has connected, :func:`bind_remote_log` also mirrors each record to
it as a ``log`` event over the same connection used for classification.
"""

import logging
from typing import Optional

from blocksort.channel import LOG_EVENT, EventTransport
from blocksort.errors import SorterError

ROOT_LOGGER = "blocksort"

# Own level so plain log() lines pass whatever level the root logger is set to
_console = logging.getLogger(f"{ROOT_LOGGER}.console")
_console.setLevel(logging.INFO)

_remote_handler: Optional["RemoteLogHandler"] = None


class RemoteLogHandler(logging.Handler):
    """Forward formatted records to the remote classifier."""

    def __init__(self, transport: EventTransport, level: int = logging.NOTSET):
        super().__init__(level)
        self.transport = transport
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord):
        try:
            self.transport.emit(LOG_EVENT, self.format(record))
        except Exception:
            self.handleError(record)


def bind_remote_log(transport: EventTransport, level: int = logging.INFO) -> RemoteLogHandler:
    """
    Mirror sorter logs to the remote classifier.

    Args:
        transport: Connection to mirror records over
        level: Minimum level forwarded

    Returns:
        The installed handler

    Raises:
        SorterError: If a remote mirror is already bound
    """
    global _remote_handler

    if _remote_handler is not None:
        raise SorterError("Remote log mirror is already bound")

    _remote_handler = RemoteLogHandler(transport, level)
    logging.getLogger(ROOT_LOGGER).addHandler(_remote_handler)
    return _remote_handler


def unbind_remote_log():
    """Remove the remote mirror (process shutdown and tests)."""
    global _remote_handler

    if _remote_handler is not None:
        logging.getLogger(ROOT_LOGGER).removeHandler(_remote_handler)
        _remote_handler = None


def log(message: str = ""):
    """Write a plain line to the console and, when bound, the remote mirror."""
    _console.info(message)
