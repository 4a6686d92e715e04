"""Network filter configuration messages."""

from .demo import DemoConfig as DemoConfig
from .demo import demo_proto_descriptor_gzip as demo_proto_descriptor_gzip
from .demo import init_demo_proto as init_demo_proto
