"""One-time registration of embedded schemas in a protobuf descriptor pool."""

import gzip
import logging
import threading

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf.descriptor import Descriptor, FileDescriptor
from google.protobuf.message import DecodeError

from .serialization import proto_fields

logger = logging.getLogger(__name__)

# Message classes by full name, filled in by LazyFile.init()
_classes: dict[str, type] = {}
_classes_lock = threading.Lock()


class SchemaInitError(RuntimeError):
    """Raised when an embedded descriptor is inconsistent."""


def field_type_name(type_number: int) -> str:
    """Name a FieldDescriptorProto.Type the way .proto sources spell it."""
    return descriptor_pb2.FieldDescriptorProto.Type.Name(type_number).removeprefix("TYPE_").lower()


def message_class(full_name: str) -> type:
    """Return the class bound to a registered message."""
    with _classes_lock:
        return _classes[full_name]


def _check_fields(descriptor: Descriptor, cls: type) -> None:
    declared = proto_fields(cls)

    for f, info in declared:
        fd = descriptor.fields_by_number.get(info.number)
        if fd is None or fd.name != f.name:
            raise SchemaInitError(
                f"{cls.__qualname__}.{f.name} does not match field {info.number} "
                f"of {descriptor.full_name}"
            )
        if field_type_name(fd.type) != info.proto_type:
            raise SchemaInitError(
                f"{cls.__qualname__}.{f.name} is declared {info.proto_type}, "
                f"but {descriptor.full_name} has {field_type_name(fd.type)}"
            )

    numbers = {info.number for _, info in declared}
    missing = [fd.name for fd in descriptor.fields if fd.number not in numbers]
    if missing:
        raise SchemaInitError(f"{cls.__qualname__} lacks fields {', '.join(missing)}")


def _bind_class(descriptor: Descriptor, cls: type) -> None:
    with _classes_lock:
        bound = _classes.get(descriptor.full_name)
        if bound is not None and bound is not cls:
            raise SchemaInitError(
                f"{descriptor.full_name} is already bound to {bound.__qualname__}"
            )
        _classes[descriptor.full_name] = cls

    logger.debug("Bound %s to %s", descriptor.full_name, cls.__qualname__)


class LazyFile:
    """An embedded file descriptor registered on first use.

    Generated bindings create one of these at import time and call bind()
    for each message class they define. init() adds the descriptor to the
    pool and binds the classes at most once, however many threads call it.

    Example:
        _file = LazyFile(RAW_DESCRIPTOR)
        _file.bind("MyMessage", MyMessage)
        descriptor = _file.init().message_types_by_name["MyMessage"]
    """

    def __init__(
        self, serialized: bytes, *, pool: descriptor_pool.DescriptorPool | None = None
    ) -> None:
        self._serialized = serialized
        self._pool = pool if pool is not None else descriptor_pool.Default()
        self._classes: dict[str, type] = {}
        self._file: FileDescriptor | None = None
        self._compressed: bytes | None = None
        self._init_lock = threading.Lock()
        self._compress_lock = threading.Lock()

    @property
    def pool(self) -> descriptor_pool.DescriptorPool:
        return self._pool

    @property
    def serialized(self) -> bytes:
        return self._serialized

    def bind(self, name: str, cls: type) -> None:
        """Associate a message class with the message called name."""
        if self._file is not None:
            raise SchemaInitError(f"Cannot bind {name} after initialization")
        self._classes[name] = cls

    def init(self) -> FileDescriptor:
        """Register the file and its classes, once.

        Raises:
            SchemaInitError: if the pool rejects the descriptor, or a bound
                class does not match the message it is bound to.
        """
        file = self._file
        if file is not None:
            return file

        with self._init_lock:
            if self._file is None:
                try:
                    file = self._pool.AddSerializedFile(self._serialized)
                except (TypeError, ValueError, DecodeError) as ex:
                    raise SchemaInitError(f"Cannot register embedded descriptor: {ex}") from ex
                logger.debug("Registered %s", file.name)

                for name, cls in self._classes.items():
                    descriptor = file.message_types_by_name.get(name)
                    if descriptor is None:
                        raise SchemaInitError(f"{file.name} declares no message {name!r}")
                    _check_fields(descriptor, cls)
                    _bind_class(descriptor, cls)
                self._file = file
            return self._file

    def compressed(self) -> bytes:
        """Return the gzip form of the serialized descriptor, computed once."""
        with self._compress_lock:
            if self._compressed is None:
                self._compressed = gzip.compress(self._serialized, mtime=0)
            return self._compressed
