class SmartDictError(Exception):
    """Base class for exceptions in this package."""


class InvalidArgumentError(SmartDictError, ValueError):
    """Raised when a policy operation receives no names or a malformed name."""


class ProtectedAttributeError(SmartDictError, AttributeError):
    """Raised when assigning to an attribute listed in ``protected_attrs``."""


class KeyNotFoundError(SmartDictError, KeyError):
    """Raised on a strict read of a declared attribute that has no value yet."""


class NoSuchAttributeError(SmartDictError, AttributeError):
    """Raised when a name is neither declared, stored, nor defined on the class."""
