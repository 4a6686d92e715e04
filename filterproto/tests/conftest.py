"""Unit tests configuration file."""

from dataclasses import dataclass, field
from typing import Any, ClassVar

import pytest
from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf.descriptor import Descriptor

from filterproto.proto.registry import LazyFile
from filterproto.proto.serialization import Message, proto_field

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


def build_field_proto(
    name: str,
    number: int,
    type: int = FieldDescriptorProto.TYPE_STRING,
    label: int = FieldDescriptorProto.LABEL_OPTIONAL,
) -> FieldDescriptorProto:
    return FieldDescriptorProto(name=name, number=number, type=type, label=label)


def build_message_proto(name: str, *fields: FieldDescriptorProto) -> descriptor_pb2.DescriptorProto:
    return descriptor_pb2.DescriptorProto(name=name, field=fields)


def build_file_proto(
    name: str = "test.proto",
    package: str = "test",
    syntax: str = "proto3",
    messages: tuple[descriptor_pb2.DescriptorProto, ...] = (),
) -> bytes:
    """Serialize a FileDescriptorProto built from the given messages."""
    file = descriptor_pb2.FileDescriptorProto(name=name, package=package, syntax=syntax)
    file.message_type.extend(messages)
    return file.SerializeToString()


SAMPLE_PROTO_RAW = build_file_proto(
    name="sample.proto",
    package="test.sample",
    messages=(
        build_message_proto(
            "SampleConfig",
            build_field_proto("name", 1),
            build_field_proto("retries", 2, type=FieldDescriptorProto.TYPE_INT32),
        ),
    ),
)

_sample_file = LazyFile(SAMPLE_PROTO_RAW, pool=descriptor_pool.DescriptorPool())


@dataclass
class SampleConfig(Message):
    name: str = proto_field(type="string", number=1, default="")
    retries: int = proto_field(type="int32", number=2, default=0)
    _unknown_fields: bytes = field(default=b"", init=False, repr=False)
    _size_cache: int = field(default=0, init=False, repr=False, compare=False)

    _FIELDS: ClassVar[tuple[tuple[int, str], ...]] = ((1, "name"), (2, "retries"))

    @classmethod
    def descriptor(cls) -> Descriptor:
        return _sample_file.init().message_types_by_name["SampleConfig"]

    def field_count(self) -> int:
        return len(self._FIELDS)

    def field_at(self, index: int) -> tuple[int, str, Any]:
        number, name = self._FIELDS[index]
        return number, name, getattr(self, name)

    def set_field_at(self, index: int, value: Any) -> None:
        setattr(self, self._FIELDS[index][1], value)


_sample_file.bind("SampleConfig", SampleConfig)


@pytest.fixture
def sample_type() -> type[SampleConfig]:
    return SampleConfig


@pytest.fixture
def field_proto():
    return build_field_proto


@pytest.fixture
def message_proto():
    return build_message_proto


@pytest.fixture
def file_proto():
    return build_file_proto
