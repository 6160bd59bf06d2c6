"""typewire: structural type descriptors and signature-keyed dynamic calls.

Usage::

    from dataclasses import dataclass
    from typewire import (
        FunctionRegistry, Dispatcher, Int64, describe, remote,
    )

    @dataclass
    class Person:
        Name: str
        Age: Int64

    registry = FunctionRegistry()

    @registry.register
    def count_ages(people: list[Person]) -> dict[Int64, int]:
        counts: dict[int, int] = {}
        for p in people:
            counts[p.Age] = counts.get(p.Age, 0) + 1
        return counts

    dispatcher = Dispatcher(registry)

    @remote(dispatcher.dispatch)
    def ages(people: list[Person]) -> dict[Int64, int]: ...

    ages([Person("Ann", 20), Person("Bob", 22)])  # -> {20: 1, 22: 1}
"""

from .types import (
    Int8, Int16, Int32, Int64,
    Uint, Uint8, Uint16, Uint32, Uint64, Uintptr,
    Float32, Complex64,
    Kind, ChanDir, ScalarType,
    ArrayLength, Variadic, array_of, chan_of, pointer_to,
    TypeDescriptor, CallSignature,
    describe, describe_callable, signature_of, type_of, reconstruct,
    to_dict, from_dict, to_text, from_text,
)
from .protocol.serializer import Serializer
from .protocol.deserializer import Deserializer
from .registry import FunctionRegistry, RegisteredFunction
from .dispatch import Dispatcher, encode_call, decode_result, function_descriptor
from .rpc import RemoteFunction, remote, call
from .config import load_config, registry_from_config, resolve_import_path, validate_config
from .exc import (
    TypewireError, DescriptorError, UnrepresentableTypeError, UnknownKindError,
    SerializationError, DeserializationError, ShapeMismatchError,
    DispatchError, DispatchMissError,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    'TypeDescriptor', 'CallSignature', 'Kind', 'ChanDir',
    'describe', 'describe_callable', 'signature_of', 'type_of', 'reconstruct',
    'to_dict', 'from_dict', 'to_text', 'from_text',
    # Types
    'Int8', 'Int16', 'Int32', 'Int64',
    'Uint', 'Uint8', 'Uint16', 'Uint32', 'Uint64', 'Uintptr',
    'Float32', 'Complex64', 'ScalarType',
    'ArrayLength', 'Variadic', 'array_of', 'chan_of', 'pointer_to',
    # Wire
    'Serializer', 'Deserializer',
    # Calls
    'FunctionRegistry', 'RegisteredFunction',
    'Dispatcher', 'encode_call', 'decode_result', 'function_descriptor',
    'RemoteFunction', 'remote', 'call',
    # Config
    'load_config', 'registry_from_config', 'resolve_import_path', 'validate_config',
    # Exceptions
    'TypewireError', 'DescriptorError', 'UnrepresentableTypeError', 'UnknownKindError',
    'SerializationError', 'DeserializationError', 'ShapeMismatchError',
    'DispatchError', 'DispatchMissError',
]
