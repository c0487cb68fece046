from __future__ import annotations

import ast
import math
import pprint
from functools import lru_cache
from typing import Any, Protocol

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

from src.core.errors import DecodeError, EncodeError


class Codec(Protocol):
    name: str

    def encode(self, value: Any, tp: Any = None) -> bytes: ...

    def decode(self, data: bytes, tp: Any) -> Any: ...


@lru_cache(maxsize=128)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def adapter_for(tp: Any) -> TypeAdapter:
    # Some hints (e.g. Annotated with unhashable metadata) can't be cached
    try:
        return _adapter(tp)
    except TypeError:
        return TypeAdapter(tp)


def _hint(value: Any, tp: Any) -> Any:
    return type(value) if tp is None else tp


def _reject_non_finite(obj: Any) -> None:
    # inf/nan ne se relisent ni en JSON ni avec literal_eval
    if isinstance(obj, float) and not math.isfinite(obj):
        raise EncodeError(f"Non-finite float {obj!r} cannot be read back")
    if isinstance(obj, dict):
        for k, v in obj.items():
            _reject_non_finite(k)
            _reject_non_finite(v)
    elif isinstance(obj, (list, tuple, set, frozenset)):
        for item in obj:
            _reject_non_finite(item)


def _checked_adapter(value: Any, tp: Any) -> TypeAdapter:
    """Adapter for the value, after refusing content that would not decode."""
    adapter = adapter_for(_hint(value, tp))
    _reject_non_finite(adapter.dump_python(value))
    return adapter


class JsonCodec:
    """JSON through pydantic: models, dataclasses and builtin containers."""

    name = "json"

    def __init__(self, indent: int | None = 2):
        self.indent = indent

    def encode(self, value: Any, tp: Any = None) -> bytes:
        try:
            return _checked_adapter(value, tp).dump_json(value, indent=self.indent)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise EncodeError(f"Cannot encode {type(value).__name__} as JSON: {e}") from e

    def decode(self, data: bytes, tp: Any) -> Any:
        # ValidationError couvre JSON malformé et schéma incompatible
        try:
            return adapter_for(tp).validate_json(data)
        except ValueError as e:
            raise DecodeError(f"Invalid JSON content: {e}") from e


class LiteralCodec:
    """
    Python literal notation: the JSON-mode dump of the value written with
    repr() (or pprint when pretty), read back with ast.literal_eval and
    validated against the type hint.
    """

    name = "literal"

    def __init__(self, pretty: bool = False):
        self.pretty = pretty

    def encode(self, value: Any, tp: Any = None) -> bytes:
        try:
            plain = _checked_adapter(value, tp).dump_python(value, mode="json")
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise EncodeError(f"Cannot encode {type(value).__name__} as literal: {e}") from e
        text = pprint.pformat(plain, indent=1, sort_dicts=False) if self.pretty else repr(plain)
        return text.encode("utf-8")

    def decode(self, data: bytes, tp: Any) -> Any:
        try:
            plain = ast.literal_eval(data.decode("utf-8"))
        except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError) as e:
            raise DecodeError(f"Invalid literal content: {e}") from e
        try:
            return adapter_for(tp).validate_python(plain)
        except ValueError as e:
            raise DecodeError(f"Literal content does not match {tp!r}: {e}") from e


CODECS: dict[str, type] = {
    JsonCodec.name: JsonCodec,
    LiteralCodec.name: LiteralCodec,
}


def get_codec(name: str) -> Codec:
    try:
        return CODECS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown codec {name!r} (expected one of: {', '.join(sorted(CODECS))})") from None
