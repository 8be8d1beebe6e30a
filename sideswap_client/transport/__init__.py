from .base import Transport
from .websocket import WebSocketTransport
from .events import TransportFrame, TransportEvent, TransportFailed, TransportConnected, TransportDisconnected

__all__ = [
    "Transport",
    "TransportConnected",
    "TransportDisconnected",
    "TransportEvent",
    "TransportFailed",
    "TransportFrame",
    "WebSocketTransport",
]
