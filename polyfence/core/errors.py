"""Exception and warning hierarchy for polyfence."""


class PolyfenceError(Exception):
    """Base class for all polyfence errors."""
    pass


class ValidationError(PolyfenceError, ValueError):
    """Raised when a shape payload is malformed (too few vertices, bad radius)."""
    pass


class ConfigurationError(PolyfenceError, ValueError):
    """Raised for invalid shape limits or kernel settings."""
    pass


class ShapeRejectedError(PolyfenceError):
    """Raised by ``FeatureStore.add_shape(..., raise_on_reject=True)``.

    Attributes:
        result: The ``AddResult`` describing the rejection
    """

    def __init__(self, result):
        self.result = result
        super().__init__(result.message)


class KernelWarning(UserWarning):
    """Emitted when a geometry operation fails and a fail-safe value is used."""
    pass


__all__ = [
    'PolyfenceError',
    'ValidationError',
    'ConfigurationError',
    'ShapeRejectedError',
    'KernelWarning',
]
