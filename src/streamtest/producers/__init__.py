"""Producer protocols and in-memory reference producers."""

from .base import Scope, SingleValueProducer, StreamProducer, ValueObserver
from .flow import FlowProducer, flow_error, flow_of
from .live import MutableLiveValue

__all__ = [
    "FlowProducer",
    "MutableLiveValue",
    "Scope",
    "SingleValueProducer",
    "StreamProducer",
    "ValueObserver",
    "flow_error",
    "flow_of",
]
