"""Wire encoding for query and response envelopes.

Envelopes are plain mappings carried as ``google.protobuf.Struct`` messages.
Struct numbers are doubles, so integral money values are written as decimal
strings and read back with ``int()``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from google.protobuf import json_format, struct_pb2


@dataclass(frozen=True)
class MethodDescriptor:
    """gRPC method a query kind is answered by, e.g. ``/proto.CryptoService/getAccountInfo``."""

    service: str
    method: str

    @property
    def path(self) -> str:
        return f"/{self.service}/{self.method}"


def encode_message(message: Mapping[str, Any]) -> bytes:
    struct = struct_pb2.Struct()
    json_format.ParseDict(dict(message), struct)
    return struct.SerializeToString()


def decode_message(data: bytes) -> Dict[str, Any]:
    struct = struct_pb2.Struct()
    struct.ParseFromString(data)
    return json_format.MessageToDict(struct)
