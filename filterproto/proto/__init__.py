"""Runtime support for filterproto messages."""

from .reflect import Describable as Describable
from .reflect import MessageView as MessageView
from .reflect import diff as diff
from .registry import LazyFile as LazyFile
from .registry import SchemaInitError as SchemaInitError
from .registry import field_type_name as field_type_name
from .registry import message_class as message_class
from .serialization import JSONFormatError as JSONFormatError
from .serialization import MalformedEncoding as MalformedEncoding
from .serialization import Message as Message
from .serialization import SerializationError as SerializationError
from .serialization import TextFormatError as TextFormatError
from .serialization import proto_field as proto_field
