"""
Exceptions raised by isonline.
"""


class HostResolutionError(Exception):
    """A target is not an IP literal and could not be resolved via DNS."""

    def __init__(self, name: str, reason: str = ""):
        self.name = name
        self.reason = reason
        message = f"Could not resolve '{name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConfigurationError(Exception):
    """Invalid settings. Raised at startup, before any round runs."""
