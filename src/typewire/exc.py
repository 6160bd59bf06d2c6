"""Exception hierarchy for typewire."""


class TypewireError(Exception):
    """Base exception for all typewire errors."""


class DescriptorError(TypewireError):
    """Malformed or inconsistent type descriptor."""


class UnrepresentableTypeError(DescriptorError):
    """Native type has no descriptor form (interface, None, Any, ...)."""


class UnknownKindError(DescriptorError):
    """Kind label or code with no corresponding native construct."""


class SerializationError(TypewireError):
    """Failed to encode a Python value to the wire format."""


class DeserializationError(TypewireError):
    """Failed to decode wire bytes to a Python value."""


class ShapeMismatchError(DeserializationError):
    """Wire value does not match the expected native type."""


class DispatchError(TypewireError):
    """A dynamic call could not be dispatched."""


class DispatchMissError(DispatchError):
    """No function registered under the requested signature."""
