"""JSON envelope for cached records.

Uses pydantic TypeAdapter so pydantic models, dataclasses and lists of
either encode the same way. Field aliases are honored on both sides, so
stored JSON keeps the field names external readers expect.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from redicache.domain.exceptions import DeserializationError, SerializationError

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


class JsonCodec:
    """Encode values to JSON text and decode JSON text into a target type."""

    def encode(self, value: Any, as_type: Any = None) -> str:
        """Serialize value as JSON.

        Args:
            value: Record (or list of records) to encode.
            as_type: Type to serialize as; defaults to type(value). Pass
                list[Model] for slices so elements use the model schema.

        Returns:
            JSON text.

        Raises:
            SerializationError: If the type has no schema or a field
                cannot be serialized.
        """
        tp = as_type if as_type is not None else type(value)
        try:
            return _adapter(tp).dump_json(value, by_alias=True).decode("utf-8")
        except (
            PydanticSerializationError,
            PydanticUserError,
            ValidationError,
            TypeError,
            ValueError,
        ) as e:
            raise SerializationError(_type_name(tp), str(e)) from e

    def decode(self, data: str | bytes, into: type[T] | Any, key: str | None = None) -> T:
        """Parse JSON text into an instance of into.

        Args:
            data: Stored JSON text.
            into: Model class, dataclass, or generic alias such as list[Model].
            key: Physical key the data came from, for error details.

        Returns:
            Validated instance of into.

        Raises:
            DeserializationError: If data is not valid JSON for into.
        """
        try:
            return _adapter(into).validate_json(data)
        except (PydanticUserError, ValidationError, TypeError, ValueError) as e:
            raise DeserializationError(_type_name(into), str(e), key=key) from e
