"""Generated protocol definitions for source/filters/network/proto/demo.proto."""

from dataclasses import dataclass, field
from typing import Any

from google.protobuf.descriptor import Descriptor, FileDescriptor

from filterproto.proto.registry import LazyFile
from filterproto.proto.serialization import Message, proto_field

DEMO_PROTO_RAW = bytes.fromhex(
    "0a27736f757263652f66696c746572732f6e6574776f726b2f70726f746f2f64"
    "656d6f2e70726f746f122d677265796d61747465725f696f2e676d5f70726f78"
    "792e736f757263652e66696c746572732e6e6574776f726b22260a0a44656d6f"
    "436f6e66696712180a076d65737361676518012001280952076d657373616765"
    "42405a3e6769746875622e636f6d2f677265796d61747465722d696f2f676d2d"
    "70726f78792f736f757263652f66696c746572732f6e6574776f726b2f70726f"
    "746f620670726f746f33"
)

_file = LazyFile(DEMO_PROTO_RAW)


def init_demo_proto() -> FileDescriptor:
    """Register demo.proto and its message classes. Safe to call repeatedly."""
    return _file.init()


def demo_proto_descriptor_gzip() -> bytes:
    return _file.compressed()


@dataclass
class DemoConfig(Message):
    message: str = proto_field(type="string", number=1, default="")
    _unknown_fields: bytes = field(default=b"", init=False, repr=False)
    _size_cache: int = field(default=0, init=False, repr=False, compare=False)

    @classmethod
    def descriptor(cls) -> Descriptor:
        return _file.init().message_types_by_name["DemoConfig"]

    def get_message(self) -> str:
        return self.message

    def set_message(self, value: str) -> None:
        self.message = value

    def field_count(self) -> int:
        return 1

    def field_at(self, index: int) -> tuple[int, str, Any]:
        if index == 0:
            return 1, "message", self.message
        raise IndexError(f"DemoConfig has no field at index {index}")

    def set_field_at(self, index: int, value: Any) -> None:
        if index == 0:
            self.message = value
            return
        raise IndexError(f"DemoConfig has no field at index {index}")


_file.bind("DemoConfig", DemoConfig)
