from .connection import ProtocolClient

__all__ = ["ProtocolClient"]
