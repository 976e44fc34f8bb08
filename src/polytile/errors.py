"""Exceptions raised by polytile."""


class ConfigError(ValueError):
    """A puzzle configuration (board size or piece shapes) is invalid.

    Raised while building pieces and puzzle configurations, before any search starts.
    """
