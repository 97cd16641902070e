"""Explicit codec registry for aggregate snapshots.

A snapshot is the aggregate's own ``to_dict()``: value objects and child
entities nest as dicts, timestamps become strings, and the aggregate
constructor accepts the same shape back. Codecs are registered once at
process start (see ``bootstrap``) and the registry is passed to whoever
needs it. Nothing is configured implicitly on import.
"""

import json
from typing import Any

from shared.errors import SerializationError


class Codec:
    """Converts one aggregate type to and from a plain dict."""

    def __init__(self, model: type, type_name: str | None = None):
        self.model = model
        self.type_name = type_name or model.__name__

    def encode(self, obj) -> dict[str, Any]:
        return obj.to_dict()

    def decode(self, data: dict[str, Any]):
        return self.model(**data)


class CodecRegistry:
    def __init__(self):
        self._by_name: dict[str, Codec] = {}
        self._by_model: dict[type, Codec] = {}

    def register(self, codec: Codec) -> None:
        if codec.type_name in self._by_name:
            raise SerializationError(f"A codec for {codec.type_name} is already registered")
        self._by_name[codec.type_name] = codec
        self._by_model[codec.model] = codec

    def codec_for(self, obj_or_type) -> Codec:
        model = obj_or_type if isinstance(obj_or_type, type) else type(obj_or_type)
        try:
            return self._by_model[model]
        except KeyError:
            raise SerializationError(f"No codec registered for {model.__name__}") from None

    @property
    def type_names(self) -> list[str]:
        return sorted(self._by_name)

    def encode(self, obj) -> dict[str, Any]:
        codec = self.codec_for(obj)
        return {"type": codec.type_name, "data": codec.encode(obj)}

    def decode(self, payload: dict[str, Any]):
        type_name = payload.get("type")
        codec = self._by_name.get(type_name)
        if codec is None:
            raise SerializationError(f"No codec registered for type {type_name!r}")
        return codec.decode(payload["data"])

    def dumps(self, obj) -> str:
        return json.dumps(self.encode(obj), sort_keys=True)

    def loads(self, raw: str | bytes):
        return self.decode(json.loads(raw))
