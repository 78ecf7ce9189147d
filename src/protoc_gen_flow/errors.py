from __future__ import annotations


class PluginError(Exception):
    """Base class for errors raised while handling a plugin request."""


class RequestDecodeError(PluginError):
    """Raised when stdin does not hold a well-formed CodeGeneratorRequest."""


class OptionsError(PluginError):
    """Raised when the request's parameter string cannot be understood."""


class UnsupportedFieldError(PluginError):
    """Raised when a field has no Flow type and unsupported=fail is set."""
