# /src/fanpress/errors.py
# Error taxonomy for the fan-press sync service


class FanPressError(Exception):
    """Base class for all fan-press service errors."""


class MalformedInput(FanPressError):
    """HTTP request body missing, unparseable, or not a JSON object.

    Maps to a 400 response. No state change, no broadcast.
    """

    status = 400


class MalformedMessage(FanPressError):
    """Inbound real-time control frame that cannot be understood.

    Sessions log and ignore these; they never close the connection.
    """


class PersistFailure(FanPressError):
    """Writing the log file failed. Logged, never raised to callers."""


class LoadFailure(FanPressError):
    """Reading the log file at startup failed. Logged, the log starts empty."""


class ConfigError(FanPressError):
    """Invalid configuration value."""
