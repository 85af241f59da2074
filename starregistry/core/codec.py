# starregistry/core/codec.py
"""
Payload codecs: turn a block payload (any JSON value) into the opaque string
stored on the block, and back.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from starregistry.core.canon import canonical_json


class PayloadCodec(ABC):
    """Abstract base for block payload encodings."""

    @abstractmethod
    def encode(self, payload: Any) -> str:
        pass

    @abstractmethod
    def decode(self, encoded: str) -> Any:
        pass


class HexJsonCodec(PayloadCodec):
    """Canonical JSON, hex encoded. Lossless for any JSON-compatible payload."""

    def encode(self, payload: Any) -> str:
        return canonical_json(payload).hex()

    def decode(self, encoded: str) -> Any:
        return json.loads(bytes.fromhex(encoded).decode("utf-8"))


DEFAULT_CODEC = HexJsonCodec()
