"""Reflective access to messages.

Generic tooling (diffing, the CLI) works on any message through the
Describable interface and the message's protobuf descriptor, without
knowing the concrete type.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from google.protobuf.descriptor import Descriptor, FieldDescriptor

if TYPE_CHECKING:
    from .serialization import Message


@runtime_checkable
class Describable(Protocol):
    """Structural access implemented explicitly by every message type.

    Fields are addressed by index, in declaration order.
    """

    def field_count(self) -> int: ...

    def field_at(self, index: int) -> tuple[int, str, Any]:
        """Return (tag, name, value) for the field at index."""
        ...

    def set_field_at(self, index: int, value: Any) -> None: ...


class MessageView:
    """Reflective view of a message instance.

    Fields can be read and written by tag number or by name. Values set
    through the view are type checked by the protobuf runtime. str() of the
    view renders the message in text form.
    """

    def __init__(self, message: Message) -> None:
        self._message = message
        self._descriptor = message.descriptor()
        self._scratch = message.proto_class()()

    @property
    def descriptor(self) -> Descriptor:
        return self._descriptor

    @property
    def message(self) -> Message:
        return self._message

    def _index(self, key: int | str) -> int:
        for index in range(self._message.field_count()):
            tag, name, _ = self._message.field_at(index)
            if key == (tag if isinstance(key, int) else name):
                return index
        raise KeyError(f"{self._descriptor.full_name} has no field {key!r}")

    def _field(self, key: int | str) -> FieldDescriptor:
        try:
            if isinstance(key, int):
                return self._descriptor.fields_by_number[key]
            return self._descriptor.fields_by_name[key]
        except KeyError:
            raise KeyError(f"{self._descriptor.full_name} has no field {key!r}") from None

    def fields(self) -> Iterator[tuple[FieldDescriptor, Any]]:
        """Iterate over (descriptor, value) for every field, set or not."""
        for index in range(self._message.field_count()):
            tag, _, value = self._message.field_at(index)
            yield self._descriptor.fields_by_number[tag], value

    def populated(self) -> Iterator[tuple[FieldDescriptor, Any]]:
        """Iterate over the fields that hold a non-default value."""
        for fd, value in self.fields():
            if value != fd.default_value:
                yield fd, value

    def get(self, key: int | str) -> Any:
        return self._message.field_at(self._index(key))[2]

    def validate(self, key: int | str, value: Any) -> None:
        """Raise KeyError, TypeError or ValueError if set() would reject value."""
        fd = self._field(key)
        setattr(self._scratch, fd.name, value)
        self._scratch.ClearField(fd.name)

    def set(self, key: int | str, value: Any) -> None:
        self.validate(key, value)
        self._message.set_field_at(self._index(key), value)

    def has(self, key: int | str) -> bool:
        return self.get(key) != self._field(key).default_value

    def clear(self, key: int | str) -> None:
        self._message.set_field_at(self._index(key), self._field(key).default_value)

    def unknown_fields(self) -> bytes:
        return self._message.unknown_fields()

    def to_text(self, *, as_one_line: bool = False) -> str:
        return self._message.to_text(as_one_line=as_one_line)

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"MessageView({self._descriptor.full_name})"


def diff(a: Describable, b: Describable) -> list[tuple[str, Any, Any]]:
    """List (name, a_value, b_value) for each field that differs."""
    if type(a) is not type(b):
        raise TypeError(f"Cannot diff {type(a).__name__} against {type(b).__name__}")

    changes: list[tuple[str, Any, Any]] = []
    for index in range(a.field_count()):
        _, name, a_value = a.field_at(index)
        b_value = b.field_at(index)[2]
        if a_value != b_value:
            changes.append((name, a_value, b_value))
    return changes
