import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import grpc

from ledger_core import MethodDescriptor, NodeChannelRegistry, TransportError
from ledger_core.channel import KEEPALIVE_OPTIONS

METHOD = MethodDescriptor("proto.CryptoService", "getAccountInfo")


class FakeRpcError(grpc.RpcError):
    def code(self):
        return grpc.StatusCode.UNAVAILABLE

    def details(self):
        return "connection refused"


class TestNodeChannelRegistry(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        patcher = patch("ledger_core.channel.grpc.aio.insecure_channel")
        self.insecure_channel = patcher.start()
        self.addCleanup(patcher.stop)
        self.channel = MagicMock()
        self.channel.close = AsyncMock()
        self.call = AsyncMock(return_value=b"response-bytes")
        self.channel.unary_unary.return_value = self.call
        self.insecure_channel.return_value = self.channel

    async def test_submit_sends_raw_bytes_on_method_path(self):
        registry = NodeChannelRegistry(call_timeout=5.0)

        response = await registry.submit("127.0.0.1:50211", b"query-bytes", METHOD)

        self.assertEqual(response, b"response-bytes")
        self.insecure_channel.assert_called_once_with("127.0.0.1:50211", options=KEEPALIVE_OPTIONS)
        self.channel.unary_unary.assert_called_once_with("/proto.CryptoService/getAccountInfo")
        self.call.assert_awaited_once_with(b"query-bytes", timeout=5.0)

    async def test_channels_are_reused_per_address(self):
        registry = NodeChannelRegistry()

        await registry.submit("127.0.0.1:50211", b"a", METHOD)
        await registry.submit("127.0.0.1:50211", b"b", METHOD)

        self.insecure_channel.assert_called_once()

    async def test_rpc_error_becomes_transport_error(self):
        print("\nTesting Channel: RPC failure surfaces as TransportError")
        self.call.side_effect = FakeRpcError()
        registry = NodeChannelRegistry()

        with self.assertRaises(TransportError) as cm:
            await registry.submit("127.0.0.1:50211", b"query-bytes", METHOD)

        self.assertEqual(cm.exception.address, "127.0.0.1:50211")
        self.assertEqual(cm.exception.code, grpc.StatusCode.UNAVAILABLE)
        self.assertEqual(cm.exception.details, "connection refused")
        self.assertIsInstance(cm.exception.__cause__, grpc.RpcError)

    async def test_close_all(self):
        registry = NodeChannelRegistry()
        registry.channel_for("127.0.0.1:50211")

        await registry.close_all()

        self.channel.close.assert_awaited_once()
        registry.channel_for("127.0.0.1:50211")
        self.assertEqual(self.insecure_channel.call_count, 2)


if __name__ == '__main__':
    unittest.main()
