"""Base class and field metadata for generated message types.

Messages are plain dataclasses. Encoding, decoding and the text and JSON
forms are delegated to the protobuf runtime through the message class that
the descriptor pool builds for each registered descriptor.
"""

from dataclasses import Field, dataclass, field, fields
from typing import Any, Self

import rich.repr
from google.protobuf import json_format, message_factory, text_format
from google.protobuf.descriptor import Descriptor
from google.protobuf.message import DecodeError
from google.protobuf.message import Message as ProtoMessage

from .reflect import MessageView


class MalformedEncoding(RuntimeError):
    """Raised when encoded bytes are truncated or otherwise invalid."""


class SerializationError(RuntimeError):
    """Raised when a message holds a value that cannot be encoded."""


class TextFormatError(RuntimeError):
    """Raised when a text form cannot be parsed into a message."""


class JSONFormatError(RuntimeError):
    """Raised when a JSON document cannot be mapped onto a message."""


@dataclass(frozen=True)
class ProtoFieldInfo:
    """Metadata for a message field."""

    proto_type: str
    number: int


def proto_field(type: str, number: int, *, default: Any) -> Any:
    """Define a message field with its wire metadata.

    The metadata is checked against the registered descriptor when the
    schema is initialized, and drives the conversion to and from protobuf
    messages.

    Args:
        type: The field type as written in the .proto source (e.g., "string").
        number: The field's tag number.
        default: Default value for the field.

    Returns:
        A dataclass field with proto metadata attached.
    """
    return field(default=default, metadata={"proto": ProtoFieldInfo(type, number)})


def proto_fields(message: Any) -> list[tuple[Field, ProtoFieldInfo]]:
    """List the dataclass fields of a message class or instance declared with proto_field()."""
    return [(f, f.metadata["proto"]) for f in fields(message) if "proto" in f.metadata]


class Message:
    """Base class for generated message types.

    Subclasses are @dataclass decorated, declare their fields with
    proto_field(), carry the two opaque slots below, and implement
    descriptor() and the Describable methods.

    Example:
        @dataclass
        class MyMessage(Message):
            name: str = proto_field(type="string", number=1, default="")
            _unknown_fields: bytes = field(default=b"", init=False, repr=False)
            _size_cache: int = field(default=0, init=False, repr=False, compare=False)
    """

    _unknown_fields: bytes
    _size_cache: int

    @classmethod
    def descriptor(cls) -> Descriptor:
        """Return the message descriptor. Generated code overrides this."""
        raise NotImplementedError("descriptor() must be implemented by generated code")

    @classmethod
    def proto_class(cls) -> type[ProtoMessage]:
        """Return the protobuf message class built from the descriptor."""
        return message_factory.GetMessageClass(cls.descriptor())

    def field_count(self) -> int:
        raise NotImplementedError("field_count() must be implemented by generated code")

    def field_at(self, index: int) -> tuple[int, str, Any]:
        raise NotImplementedError("field_at() must be implemented by generated code")

    def set_field_at(self, index: int, value: Any) -> None:
        raise NotImplementedError("set_field_at() must be implemented by generated code")

    def to_proto(self) -> ProtoMessage:
        """Build the equivalent protobuf message, unknown fields included.

        Raises:
            SerializationError: if a field holds a value its type cannot take.
        """
        proto = self.proto_class()()
        for f, _ in proto_fields(self):
            try:
                setattr(proto, f.name, getattr(self, f.name))
            except (TypeError, ValueError) as ex:
                raise SerializationError(f"{f.name}: {ex}") from ex
        proto.MergeFromString(self._unknown_fields)
        return proto

    @classmethod
    def from_proto(cls, proto: ProtoMessage) -> Self:
        """Build a message from a protobuf message of the same type."""
        message = cls(**{f.name: getattr(proto, f.name) for f, _ in proto_fields(cls)})

        rest = cls.proto_class()()
        rest.CopyFrom(proto)
        for fd in rest.DESCRIPTOR.fields:
            rest.ClearField(fd.name)
        message._unknown_fields = rest.SerializeToString()
        return message

    def pack(self) -> bytes:
        """Encode this message to bytes.

        Known fields are written in field number order with default values
        left out, followed by the unknown fields exactly as they were read.
        """
        data = self.to_proto().SerializeToString(deterministic=True)
        self._size_cache = len(data)
        return data

    @classmethod
    def unpack(cls, data: bytes | memoryview, offset: int = 0) -> tuple[Self, int]:
        """Decode a message from the bytes between offset and the end of data.

        Args:
            data: The bytes to decode from.
            offset: Starting offset in data.

        Returns:
            Tuple of (instance, bytes_consumed).
        """
        proto = cls.proto_class()()
        try:
            proto.ParseFromString(bytes(data[offset:]))
        except DecodeError as ex:
            raise MalformedEncoding(f"Cannot decode {cls.__name__}: {ex}") from ex
        return cls.from_proto(proto), len(data) - offset

    def byte_size(self) -> int:
        """Compute the encoded size and record it."""
        self._size_cache = self.to_proto().ByteSize()
        return self._size_cache

    def cached_size(self) -> int:
        """Return the size recorded by the last pack() or byte_size() call."""
        return self._size_cache

    def unknown_fields(self) -> bytes:
        return self._unknown_fields

    def discard_unknown_fields(self) -> None:
        self._unknown_fields = b""

    def copy_from(self, other: Self) -> None:
        """Replace the contents of this message with those of other."""
        if type(other) is not type(self):
            raise TypeError(f"Cannot copy {type(other).__name__} into {type(self).__name__}")
        for index in range(other.field_count()):
            self.set_field_at(index, other.field_at(index)[2])
        self._unknown_fields = other._unknown_fields
        self._size_cache = 0

    def clear(self) -> None:
        self.copy_from(type(self)())

    def parse(self, data: bytes | memoryview) -> None:
        """Replace the contents of this message with the decoded data.

        The data is decoded into a new message first, so this message is
        left untouched when decoding fails.
        """
        decoded, _ = type(self).unpack(data)
        self.copy_from(decoded)

    def proto_reflect(self) -> MessageView:
        return MessageView(self)

    def to_text(self, *, as_one_line: bool = False) -> str:
        """Render the message in protobuf text format, unknown fields by number."""
        return text_format.MessageToString(
            self.to_proto(), as_one_line=as_one_line, print_unknown_fields=True
        )

    @classmethod
    def from_text(cls, text: str) -> Self:
        proto = cls.proto_class()()
        try:
            text_format.Parse(text, proto)
        except text_format.ParseError as ex:
            raise TextFormatError(str(ex)) from ex
        return cls.from_proto(proto)

    def to_dict(self) -> dict[str, Any]:
        return json_format.MessageToDict(self.to_proto())

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, ignore_unknown: bool = False) -> Self:
        proto = cls.proto_class()()
        try:
            json_format.ParseDict(data, proto, ignore_unknown_fields=ignore_unknown)
        except json_format.ParseError as ex:
            raise JSONFormatError(str(ex)) from ex
        return cls.from_proto(proto)

    def to_json(self, *, indent: int | None = None) -> str:
        return json_format.MessageToJson(self.to_proto(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str, *, ignore_unknown: bool = False) -> Self:
        proto = cls.proto_class()()
        try:
            json_format.Parse(text, proto, ignore_unknown_fields=ignore_unknown)
        except json_format.ParseError as ex:
            raise JSONFormatError(str(ex)) from ex
        return cls.from_proto(proto)

    def __str__(self) -> str:
        return self.to_text()

    def __rich_repr__(self) -> rich.repr.Result:
        descriptor = self.descriptor()
        for index in range(self.field_count()):
            tag, name, value = self.field_at(index)
            yield name, value, descriptor.fields_by_number[tag].default_value
