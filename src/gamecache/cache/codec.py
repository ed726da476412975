"""Payload codecs binding a cache to a concrete value type.

A :class:`PayloadCodec` converts values of type ``T`` to the
JSON-compatible form stored in an :class:`~gamecache.models.Envelope` and
back again, using a :class:`pydantic.TypeAdapter`. The store never looks
inside payloads; it only calls :meth:`PayloadCodec.dump` and
:meth:`PayloadCodec.load`.

Example::

    from gamecache.cache.codec import PayloadCodec

    codec = PayloadCodec(GameDetails)            # a pydantic model
    raw = codec.dump(details)                    # -> dict
    assert codec.load(raw) == details

    PayloadCodec()                               # any JSON value, as-is
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


class PayloadCodec(Generic[T]):
    """Serialize/deserialize capability for cache payloads of type ``T``.

    Args:
        type_: Any type pydantic can validate -- a ``BaseModel`` subclass,
            a ``TypedDict``, ``list[int]``, ``dict[str, Any]``. Defaults
            to ``Any``, which stores JSON-compatible values unchanged.
    """

    def __init__(self, type_: Any = Any) -> None:
        self._type = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    @property
    def type(self) -> Any:
        """The payload type this codec validates against."""
        return self._type

    def dump(self, value: T) -> Any:
        """Return the JSON-compatible form of *value*.

        Raises:
            ValueError: If *value* cannot be serialised
                (:class:`pydantic_core.PydanticSerializationError`).
        """
        return self._adapter.dump_python(value, mode="json")

    def load(self, raw: Any) -> T:
        """Validate *raw* back into a ``T``.

        Raises:
            ValueError: If *raw* does not match the payload type
                (:class:`pydantic.ValidationError`).
        """
        return self._adapter.validate_python(raw)
