"""Typed values, schemas and fixed-size records built from them."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from .errors import DataTypeMismatchError, DBError, ErrorCode

_INT_SIZE = 4
_FLOAT_SIZE = 4
_BOOL_SIZE = 1


class DataType(IntEnum):
    """Types an attribute can hold."""

    INT = 0
    STRING = 1
    FLOAT = 2
    BOOL = 3


_PYTHON_TYPES = {
    DataType.INT: (int,),
    DataType.STRING: (str,),
    DataType.FLOAT: (float, int),
    DataType.BOOL: (bool,),
}


@dataclass(frozen=True)
class Value:
    """A value tagged with its data type."""

    dt: DataType
    v: int | float | str | bool

    def __post_init__(self):
        dt = DataType(self.dt)
        object.__setattr__(self, "dt", dt)
        expected = _PYTHON_TYPES[dt]
        if not isinstance(self.v, expected) or (
            dt is not DataType.BOOL and isinstance(self.v, bool)
        ):
            raise TypeError(f"{self.v!r} is not a valid {dt.name} value")
        if dt is DataType.FLOAT:
            object.__setattr__(self, "v", float(self.v))

    @staticmethod
    def parse(text: str) -> "Value":
        """Build a value from a type letter (i, f, s, b) followed by its text."""
        if not text:
            raise DBError("empty value text", ErrorCode.RM_UNKNOWN_DATATYPE)
        kind, body = text[0], text[1:]
        if kind == "i":
            return Value(DataType.INT, int(body))
        if kind == "f":
            return Value(DataType.FLOAT, float(body))
        if kind == "s":
            return Value(DataType.STRING, body)
        if kind == "b":
            return Value(DataType.BOOL, body[:1] == "t")
        raise DBError(f"unknown value type {kind!r}", ErrorCode.RM_UNKNOWN_DATATYPE)

    def serialize(self) -> str:
        """Render the value as text without its type letter."""
        if self.dt is DataType.INT:
            return str(self.v)
        if self.dt is DataType.FLOAT:
            return f"{self.v:f}"
        if self.dt is DataType.BOOL:
            return "true" if self.v else "false"
        return self.v


@dataclass(frozen=True)
class RID:
    """Identifies a record by page and slot."""

    page: int = -1
    slot: int = -1


@dataclass(frozen=True)
class Schema:
    """Names, types and string lengths of a table's attributes."""

    attr_names: tuple[str, ...]
    data_types: tuple[DataType, ...]
    type_length: tuple[int, ...]
    key_attrs: tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "attr_names", tuple(self.attr_names))
        object.__setattr__(self, "data_types", tuple(DataType(t) for t in self.data_types))
        object.__setattr__(self, "type_length", tuple(self.type_length))
        object.__setattr__(self, "key_attrs", tuple(self.key_attrs))
        if not len(self.attr_names) == len(self.data_types) == len(self.type_length):
            raise ValueError("attribute names, types and lengths differ in number")
        if any(not 0 <= k < len(self.attr_names) for k in self.key_attrs):
            raise ValueError("key attribute index out of range")

    @property
    def num_attr(self) -> int:
        return len(self.attr_names)

    def _attr_size(self, index: int) -> int:
        dt = self.data_types[index]
        if dt is DataType.STRING:
            return self.type_length[index]
        if dt is DataType.BOOL:
            return _BOOL_SIZE
        if dt is DataType.FLOAT:
            return _FLOAT_SIZE
        return _INT_SIZE

    def record_size(self) -> int:
        """Number of bytes a record of this schema occupies."""
        return sum(self._attr_size(i) for i in range(self.num_attr))

    def attr_offset(self, attr_num: int) -> int:
        """Byte offset of an attribute within a record."""
        if not 0 <= attr_num < self.num_attr:
            raise IndexError(f"attribute {attr_num} does not exist")
        return sum(self._attr_size(i) for i in range(attr_num))


@dataclass
class Record:
    """Raw bytes of one tuple and the identifier it is stored under."""

    data: bytearray
    id: RID = field(default_factory=RID)

    def _slice(self, schema: Schema, attr_num: int) -> tuple[int, int]:
        start = schema.attr_offset(attr_num)
        end = start + schema._attr_size(attr_num)
        if len(self.data) < end:
            raise ValueError("record data is shorter than the schema requires")
        return start, end

    def get_attr(self, schema: Schema, attr_num: int) -> Value:
        """Read one attribute as a typed value."""
        start, end = self._slice(schema, attr_num)
        raw = bytes(self.data[start:end])
        dt = schema.data_types[attr_num]
        if dt is DataType.STRING:
            return Value(dt, raw.split(b"\0", 1)[0].decode("utf-8"))
        if dt is DataType.INT:
            return Value(dt, int.from_bytes(raw, "little", signed=True))
        if dt is DataType.FLOAT:
            return Value(dt, struct.unpack("<f", raw)[0])
        return Value(dt, raw != b"\0")

    def set_attr(self, schema: Schema, attr_num: int, value: Value) -> None:
        """Write one attribute; its type must match the schema."""
        start, end = self._slice(schema, attr_num)
        dt = schema.data_types[attr_num]
        if value.dt is not dt:
            raise DataTypeMismatchError(
                f"attribute {attr_num} holds {dt.name}, not {value.dt.name}"
            )
        size = end - start
        if dt is DataType.STRING:
            encoded = value.v.encode("utf-8")
            if len(encoded) > size:
                raise ValueError(f"string longer than {size} bytes")
            raw = encoded.ljust(size, b"\0")
        elif dt is DataType.INT:
            try:
                raw = value.v.to_bytes(size, "little", signed=True)
            except OverflowError as exc:
                raise ValueError(f"{value.v} does not fit in {size} bytes") from exc
        elif dt is DataType.FLOAT:
            raw = struct.pack("<f", value.v)
        else:
            raw = b"\1" if value.v else b"\0"
        self.data[start:end] = raw


def create_record(schema: Schema) -> Record:
    """A zero-filled record of the schema's size with no identifier yet."""
    return Record(bytearray(schema.record_size()), RID(-1, -1))