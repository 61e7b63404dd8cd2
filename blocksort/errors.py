"""Exceptions raised by the sorter."""


class SorterError(Exception):
    """Base class for sorter failures."""


class CaptureError(SorterError):
    """No frame was captured for the current cycle."""


class ConfigurationError(SorterError):
    """The class table or actuator configuration is invalid."""


class ChannelBusyError(SorterError):
    """A classification request is already outstanding on the channel."""
