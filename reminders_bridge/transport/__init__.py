"""Transport adapter: method channel, wire codec and stdio server."""

from .channel import MethodChannel, MethodResponse
from .stdio import StdioServer

__all__ = ['MethodChannel', 'MethodResponse', 'StdioServer']
