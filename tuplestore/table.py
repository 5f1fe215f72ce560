"""Tables of fixed-size records stored in a page file behind a buffer pool."""

from __future__ import annotations

import json
import os
import struct
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from .buffer_mgr import PAGE_SIZE, BufferPool, ReplacementStrategy, create_page_file
from .errors import (
    DBError,
    ErrorCode,
    RecordNotFoundError,
    TableExistsError,
    TableNotFoundError,
)
from .expr import Expr, eval_expr
from .records import RID, DataType, Record, Schema

SCHEMA_PAGE = 0
FIRST_DIRECTORY_PAGE = 1
FIRST_DATA_PAGE = 2
POOL_FRAMES = 3

_DIR_HEADER = struct.Struct("<IiI")  # entries on page, next directory page, page count
_DIR_ENTRY = struct.Struct("<III")  # data page, records stored, first free slot
_ENTRIES_PER_PAGE = (PAGE_SIZE - _DIR_HEADER.size) // _DIR_ENTRY.size
_NO_NEXT = -1


@dataclass
class _DirEntry:
    page_num: int
    count: int = 0
    first_free: int = 0


def _slot_size(schema: Schema) -> int:
    return schema.record_size() + 1


def _capacity(schema: Schema) -> int:
    return PAGE_SIZE // _slot_size(schema)


@contextmanager
def _pinned(pool: BufferPool, page_num: int, write: bool = False) -> Iterator[bytearray]:
    handle = pool.pin_page(page_num)
    try:
        yield handle.data
    finally:
        if write:
            pool.mark_dirty(handle)
        pool.unpin_page(handle)


def _encode_schema(schema: Schema) -> bytes:
    payload = json.dumps(
        {
            "attr_names": list(schema.attr_names),
            "data_types": [int(t) for t in schema.data_types],
            "type_length": list(schema.type_length),
            "key_attrs": list(schema.key_attrs),
        }
    ).encode("utf-8")
    if len(payload) > PAGE_SIZE:
        raise DBError("schema does not fit on one page")
    return payload.ljust(PAGE_SIZE, b"\0")


def _decode_schema(raw: bytes) -> Schema:
    try:
        fields = json.loads(raw.split(b"\0", 1)[0].decode("utf-8"))
        return Schema(
            fields["attr_names"],
            [DataType(t) for t in fields["data_types"]],
            fields["type_length"],
            fields["key_attrs"],
        )
    except (ValueError, KeyError, TypeError) as exc:
        raise DBError(f"cannot read table schema: {exc}") from exc


def _write_directory(
    pool: BufferPool, entries: list[_DirEntry], dir_pages: list[int], page_count: int
) -> int:
    """Store the directory across a chain of pages; returns the new page count."""
    chunks = [
        entries[start:start + _ENTRIES_PER_PAGE]
        for start in range(0, len(entries), _ENTRIES_PER_PAGE)
    ] or [[]]
    while len(dir_pages) < len(chunks):
        dir_pages.append(page_count)
        page_count += 1
    for index, (page_num, chunk) in enumerate(zip(dir_pages, chunks)):
        next_page = dir_pages[index + 1] if index + 1 < len(chunks) else _NO_NEXT
        content = bytearray(PAGE_SIZE)
        _DIR_HEADER.pack_into(content, 0, len(chunk), next_page, page_count)
        for position, entry in enumerate(chunk):
            _DIR_ENTRY.pack_into(
                content,
                _DIR_HEADER.size + position * _DIR_ENTRY.size,
                entry.page_num,
                entry.count,
                entry.first_free,
            )
        with _pinned(pool, page_num, write=True) as data:
            data[:] = content
    return page_count


def _read_directory(pool: BufferPool) -> tuple[list[_DirEntry], list[int], int]:
    entries: list[_DirEntry] = []
    dir_pages: list[int] = []
    page_count: int | None = None
    page_num = FIRST_DIRECTORY_PAGE
    while page_num != _NO_NEXT:
        if page_num in dir_pages:
            raise DBError("page directory chain is corrupt")
        dir_pages.append(page_num)
        with _pinned(pool, page_num) as data:
            raw = bytes(data)
        count, next_page, stored_pages = _DIR_HEADER.unpack_from(raw, 0)
        if page_count is None:
            page_count = stored_pages
        entries.extend(
            _DirEntry(*_DIR_ENTRY.unpack_from(raw, _DIR_HEADER.size + i * _DIR_ENTRY.size))
            for i in range(count)
        )
        page_num = next_page
    return entries, dir_pages, page_count or FIRST_DATA_PAGE + 1


def create_table(name, schema: Schema) -> None:
    """Create a table file holding the schema and an empty page directory."""
    if os.path.exists(name):
        raise TableExistsError(f"table {name} already exists")
    if _capacity(schema) == 0:
        raise ValueError("records of this schema do not fit on a page")
    create_page_file(name)
    with BufferPool(name, 1, ReplacementStrategy.FIFO) as pool:
        with _pinned(pool, SCHEMA_PAGE, write=True) as data:
            data[:] = _encode_schema(schema)
        _write_directory(
            pool, [_DirEntry(FIRST_DATA_PAGE)], [FIRST_DIRECTORY_PAGE], FIRST_DATA_PAGE + 1
        )


def open_table(name) -> "Table":
    """Open an existing table for reading and writing."""
    if not os.path.exists(name):
        raise TableNotFoundError(f"table {name} does not exist")
    pool = BufferPool(name, POOL_FRAMES, ReplacementStrategy.FIFO)
    try:
        with _pinned(pool, SCHEMA_PAGE) as data:
            schema = _decode_schema(bytes(data))
        directory, dir_pages, page_count = _read_directory(pool)
    except BaseException:
        pool.shutdown()
        raise
    return Table(name, schema, pool, directory, dir_pages, page_count)


def delete_table(name) -> None:
    """Remove a table's file."""
    if not os.path.exists(name):
        raise TableNotFoundError(f"table {name} does not exist")
    os.remove(name)


class Table:
    """An open table; use open_table to obtain one."""

    def __init__(self, name, schema: Schema, pool: BufferPool,
                 directory: list[_DirEntry], dir_pages: list[int], page_count: int):
        self.name = name
        self.schema = schema
        self._pool = pool
        self._directory = directory
        self._dir_pages = dir_pages
        self._page_count = page_count
        self._record_size = schema.record_size()
        self._slot_size = _slot_size(schema)
        self._capacity = _capacity(schema)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise DBError("table is closed")

    def _entry(self, page_num: int) -> _DirEntry:
        entry = next((e for e in self._directory if e.page_num == page_num), None)
        if entry is None:
            raise RecordNotFoundError(f"page {page_num} holds no records of this table")
        return entry

    def _check_slot(self, rid: RID) -> _DirEntry:
        entry = self._entry(rid.page)
        if not 0 <= rid.slot < self._capacity:
            raise RecordNotFoundError(f"slot {rid.slot} does not exist")
        return entry

    def _check_data(self, record: Record) -> None:
        if len(record.data) != self._record_size:
            raise ValueError(
                f"record holds {len(record.data)} bytes, schema needs {self._record_size}"
            )

    def _first_free(self, data: bytearray) -> int:
        return next(
            (slot for slot in range(self._capacity) if data[slot * self._slot_size] == 0),
            self._capacity,
        )

    def _read_slot(self, page_num: int, slot: int) -> Record | None:
        start = slot * self._slot_size
        with _pinned(self._pool, page_num) as data:
            if data[start] == 0:
                return None
            content = bytearray(data[start + 1:start + self._slot_size])
        return Record(content, RID(page_num, slot))

    def num_tuples(self) -> int:
        """Number of records stored in the table."""
        return sum(entry.count for entry in self._directory)

    def insert_record(self, record: Record) -> RID:
        """Store a record in the first free slot; sets and returns its identifier."""
        self._ensure_open()
        self._check_data(record)
        entry = next((e for e in self._directory if e.count < self._capacity), None)
        if entry is None:
            entry = _DirEntry(self._page_count)
            self._page_count += 1
            self._directory.append(entry)
        slot = entry.first_free
        start = slot * self._slot_size
        with _pinned(self._pool, entry.page_num, write=True) as data:
            data[start] = 1
            data[start + 1:start + self._slot_size] = record.data
            entry.first_free = self._first_free(data)
        entry.count += 1
        record.id = RID(entry.page_num, slot)
        return record.id

    def delete_record(self, rid: RID) -> None:
        """Remove the record stored under an identifier."""
        self._ensure_open()
        entry = self._check_slot(rid)
        start = rid.slot * self._slot_size
        with _pinned(self._pool, rid.page, write=True) as data:
            if data[start] == 0:
                raise RecordNotFoundError(f"no record at page {rid.page}, slot {rid.slot}")
            data[start:start + self._slot_size] = bytes(self._slot_size)
        entry.count -= 1
        entry.first_free = min(entry.first_free, rid.slot)

    def update_record(self, record: Record) -> None:
        """Overwrite the stored record that has the same identifier."""
        self._ensure_open()
        self._check_data(record)
        self._check_slot(record.id)
        start = record.id.slot * self._slot_size
        with _pinned(self._pool, record.id.page, write=True) as data:
            if data[start] == 0:
                raise RecordNotFoundError(
                    f"no record at page {record.id.page}, slot {record.id.slot}"
                )
            data[start + 1:start + self._slot_size] = record.data

    def get_record(self, rid: RID) -> Record:
        """Fetch a copy of the record stored under an identifier."""
        self._ensure_open()
        self._check_slot(rid)
        record = self._read_slot(rid.page, rid.slot)
        if record is None:
            raise RecordNotFoundError(f"no record at page {rid.page}, slot {rid.slot}")
        return record

    def scan(self, condition: Expr | None = None) -> "Scan":
        """Iterate over records for which the condition holds; all of them if None."""
        self._ensure_open()
        return Scan(self, condition)

    def close(self) -> None:
        """Write the page directory back and release the page file."""
        if self._closed:
            return
        self._page_count = _write_directory(
            self._pool, self._directory, self._dir_pages, self._page_count
        )
        self._pool.shutdown()
        self._closed = True

    def __enter__(self) -> "Table":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Scan:
    """An iterator over the records of a table that satisfy a condition."""

    def __init__(self, table: Table, condition: Expr | None):
        self._table = table
        self._condition = condition
        self._entry_index = 0
        self._slot = 0
        self._closed = False

    def _matches(self, record: Record) -> bool:
        if self._condition is None:
            return True
        result = eval_expr(record, self._table.schema, self._condition)
        if result.dt is not DataType.BOOL:
            raise DBError(
                "scan condition must yield a boolean",
                ErrorCode.RM_EXPR_RESULT_IS_NOT_BOOLEAN,
            )
        return bool(result.v)

    def __iter__(self) -> "Scan":
        return self

    def __next__(self) -> Record:
        table = self._table
        while not self._closed and self._entry_index < len(table._directory):
            if self._slot >= table._capacity:
                self._entry_index += 1
                self._slot = 0
                continue
            page_num = table._directory[self._entry_index].page_num
            record = table._read_slot(page_num, self._slot)
            self._slot += 1
            if record is not None and self._matches(record):
                return record
        self._closed = True
        raise StopIteration

    def close(self) -> None:
        """End the scan; further iteration yields nothing."""
        self._closed = True