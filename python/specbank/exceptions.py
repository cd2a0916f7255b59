"""Exceptions raised by specbank."""


class ConfigurationError(ValueError):
    """Invalid transform parameters, window, or input array.

    Raised before any frame is processed, so no partial spectrum or
    partial signal is ever returned alongside it.
    """
