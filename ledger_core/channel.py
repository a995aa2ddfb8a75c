from typing import Dict, Optional

import grpc
import grpc.aio

from .errors import TransportError
from .wire import MethodDescriptor

# gRPC keepalive options to keep node connections warm between queries
KEEPALIVE_OPTIONS = [
    ('grpc.keepalive_time_ms', 10000),
    ('grpc.keepalive_timeout_ms', 5000),
    ('grpc.keepalive_permit_without_calls', True),
    ('grpc.http2.min_time_between_pings_ms', 10000),
    ('grpc.http2.max_pings_without_data', 0),
]


class NodeChannelRegistry:
    """Unary RPC channel to ledger nodes, one cached ``grpc.aio`` channel per address."""

    def __init__(self, secure: bool = False, call_timeout: Optional[float] = None):
        self._secure = secure
        self._call_timeout = call_timeout
        self._channels: Dict[str, grpc.aio.Channel] = {}

    def channel_for(self, address: str) -> grpc.aio.Channel:
        channel = self._channels.get(address)
        if channel is not None:
            return channel

        if self._secure:
            channel = grpc.aio.secure_channel(
                address, grpc.ssl_channel_credentials(), options=KEEPALIVE_OPTIONS
            )
        else:
            channel = grpc.aio.insecure_channel(address, options=KEEPALIVE_OPTIONS)
        self._channels[address] = channel
        return channel

    async def submit(self, address: str, query: bytes, method: MethodDescriptor) -> bytes:
        """Send serialized ``query`` to the node at ``address``; returns the raw response."""
        # No serializers: the payload already is wire bytes.
        call = self.channel_for(address).unary_unary(method.path)
        try:
            return await call(query, timeout=self._call_timeout)
        except grpc.RpcError as exc:
            code = exc.code() if hasattr(exc, "code") else None
            details = exc.details() if hasattr(exc, "details") else str(exc)
            raise TransportError(address, code, details) from exc

    async def close_all(self) -> None:
        """Closes all open gRPC channels."""
        channels = list(self._channels.values())
        self._channels.clear()
        for channel in channels:
            await channel.close()
