# tuplestore

A small page-based record manager. A table lives in a single page file of
4096-byte pages: page 0 holds the table's schema, page 1 starts the page
directory, and records are stored in fixed-size slots on data pages from
page 2 onwards. Every page access goes through a buffer pool with FIFO or LRU
replacement.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `tuplestore.errors` – `ErrorCode` and the `DBError` exception hierarchy
  (`PageFileNotFoundError`, `WriteFailedError`, `ReadNonExistingPageError`,
  `BufferPoolError`, `TableExistsError`, `TableNotFoundError`,
  `DataTypeMismatchError`, `ComparisonTypeError`, `NotBooleanError`,
  `RecordNotFoundError`), plus `format_error`, which renders an error as
  `EC (code), "message"`.
- `tuplestore.buffer_mgr` – `create_page_file`, `BufferPool`, `PageHandle`,
  `Frame` and `ReplacementStrategy`.
- `tuplestore.buffer_stats` – frame contents, dirty flags, pin counts, I/O
  counters and printable views of a pool or a page.
- `tuplestore.records` – `DataType`, `Value`, `RID`, `Schema`, `Record` and
  `create_record`.
- `tuplestore.expr` – filter expressions (`Constant`, `AttrRef`, `OpExpr`,
  `Operator`) and `eval_expr`.
- `tuplestore.table` – `create_table`, `open_table`, `delete_table`, `Table`
  and `Scan`.
- `tuplestore.cli` – the interactive student console.

## Using the library

Define a schema, create a table and insert records:

```python
from tuplestore.records import DataType, Schema, Value, create_record
from tuplestore.table import create_table, open_table, delete_table
from tuplestore.expr import AttrRef, Constant, OpExpr, Operator

schema = Schema(
    attr_names=["a", "b", "c"],
    data_types=[DataType.INT, DataType.STRING, DataType.INT],
    type_length=[0, 4, 0],
    key_attrs=[0],
)

create_table("people.tbl", schema)

with open_table("people.tbl") as table:
    record = create_record(table.schema)
    record.set_attr(table.schema, 0, Value.parse("i1"))
    record.set_attr(table.schema, 1, Value.parse("saaaa"))
    record.set_attr(table.schema, 2, Value.parse("i3"))
    rid = table.insert_record(record)

    print(table.num_tuples())
    fetched = table.get_record(rid)

    condition = OpExpr(Operator.COMP_EQUAL, [Constant(Value.parse("i3")), AttrRef(2)])
    for match in table.scan(condition):
        print(match.get_attr(table.schema, 1).v)

delete_table("people.tbl")
```

Values are written as a type letter followed by the text of the value:
`i42` is an integer, `f1.5` a float, `btrue` a boolean (anything starting
with `t` is true) and `sabc` a string. `Value.serialize` renders a value
back as text without its type letter.

Integers take 4 bytes, floats 4, booleans 1 and strings the length given in
`type_length`; `Schema.record_size` and `Schema.attr_offset` report the
layout. Setting an attribute with a value of the wrong type raises
`DataTypeMismatchError`; a string longer than its attribute raises
`ValueError`.

`Table.insert_record` puts the record in the first free slot and sets its
`id`; `update_record` overwrites the record with the same `id`;
`delete_record` frees a slot. Reading, updating or deleting an empty slot
raises `RecordNotFoundError`. `Table.scan(None)` yields every record. The page
directory is written back when the table is closed.

Comparing values of different types raises `ComparisonTypeError`; applying
`BOOL_AND`, `BOOL_OR` or `BOOL_NOT` to a non-boolean raises
`NotBooleanError`.

### Buffer pool

The buffer pool can be used directly on any page file:

```python
from tuplestore.buffer_mgr import BufferPool, ReplacementStrategy, create_page_file
from tuplestore import buffer_stats

create_page_file("data.bin")
with BufferPool("data.bin", 3, ReplacementStrategy.LRU) as pool:
    page = pool.pin_page(0)
    page.data[:5] = b"hello"
    pool.mark_dirty(page)
    pool.unpin_page(page)
    print(buffer_stats.describe_pool(pool))   # {LRU 3}: [0 0],[-1 0],[-1 0]
    print(buffer_stats.num_read_io(pool), buffer_stats.num_write_io(pool))
```

Pinning a page past the end of the file extends the file with empty pages.
A dirty page is written to disk when its last pin is released and again when
it is evicted or the pool is flushed. When every frame is pinned, pinning a
new page raises `BufferPoolError`. Only the FIFO and LRU strategies are
implemented; constructing a pool with `CLOCK`, `LFU` or `LRU_K` raises
`BufferPoolError`.

## Interactive student database

The package installs a console program that keeps a table of students (an
integer id and a name of up to ten bytes):

```
tuplestore
```

It reads whitespace-separated answers from standard input. The menu offers:

- `1` create a table under a name you give (in the current directory) and open it
- `2` or `V` list the students in the open table
- `3` insert a student
- `4` change the name of the student with a given id
- `5` delete the student with a given id
- `E` exit

Errors such as a missing table or an unknown id are reported and the menu is
shown again. Any other menu choice prints `Unknown input!` and exits with
status 1; end of input exits with status 0. The console only creates new
tables; it does not reopen an existing one.

## Limits

There is no index, no transaction or locking support, and no concurrent
access: a table file is meant to be opened by one `Table` at a time.