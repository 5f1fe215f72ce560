"""An interactive console for a small table of students."""

from __future__ import annotations

import argparse
import sys
from typing import Iterator, TextIO

from .errors import DBError, RecordNotFoundError
from .expr import AttrRef, Constant, OpExpr, Operator
from .records import RID, DataType, Record, Schema, Value, create_record
from .table import Table, create_table, open_table

NAME_LENGTH = 10

STUDENT_SCHEMA = Schema(
    ("id", "name"),
    (DataType.INT, DataType.STRING),
    (0, NAME_LENGTH),
    (0,),
)

MENU = (
    "\n1. Create table\n"
    "2. View table\n"
    "3. Insert student\n"
    "4. Update student name\n"
    "5. Delete student\n"
    "\n"
    "V. View\n"
    "E. Exit\n"
    "\n"
    "What would you like to do:"
)


class _EndOfInput(Exception):
    """The input stream ran out of tokens."""


class StudentShell:
    """A menu-driven session over a table of student ids and names."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.table: Table | None = None
        self._tokens = self._read_tokens()

    def _read_tokens(self) -> Iterator[str]:
        for line in self.stdin:
            yield from line.split()

    def _say(self, text: str) -> None:
        print(text, file=self.stdout)

    def _require_table(self) -> Table:
        if self.table is None or self.table.closed:
            raise DBError("no table is open; create one first")
        return self.table

    @staticmethod
    def _as_record(student_id: int, name: str) -> Record:
        record = create_record(STUDENT_SCHEMA)
        record.set_attr(STUDENT_SCHEMA, 0, Value(DataType.INT, student_id))
        record.set_attr(STUDENT_SCHEMA, 1, Value(DataType.STRING, name))
        return record

    def _find(self, student_id: int) -> Record:
        table = self._require_table()
        condition = OpExpr(
            Operator.COMP_EQUAL,
            (Constant(Value(DataType.INT, student_id)), AttrRef(0)),
        )
        scan = table.scan(condition)
        try:
            record = next(scan, None)
        finally:
            scan.close()
        if record is None:
            raise RecordNotFoundError(f"no student with id {student_id}")
        return record

    def create(self, table_name: str) -> None:
        """Create a student table under the given name and open it."""
        self._close()
        create_table(table_name, STUDENT_SCHEMA)
        self.table = open_table(table_name)
        self._say("Table created!")

    def insert(self, student_id: int, name: str) -> RID:
        """Add a student; returns the identifier the record was stored under."""
        table = self._require_table()
        rid = table.insert_record(self._as_record(student_id, name))
        self._say("Tuple inserted!")
        return rid

    def update(self, student_id: int, name: str) -> None:
        """Change the name of the student with the given id."""
        table = self._require_table()
        stored = self._find(student_id)
        record = self._as_record(student_id, name)
        record.id = stored.id
        table.update_record(record)
        self._say("Tuple updated!")

    def delete(self, student_id: int) -> None:
        """Remove the student with the given id."""
        table = self._require_table()
        stored = self._find(student_id)
        table.delete_record(stored.id)
        self._say("Tuple deleted!")

    def _view(self) -> None:
        table = self._require_table()
        self._say("ID\tNAME")
        for record in table.scan():
            student_id = record.get_attr(STUDENT_SCHEMA, 0).v
            name = record.get_attr(STUDENT_SCHEMA, 1).v
            self._say(f"{student_id}\t{name}")

    def _close(self) -> None:
        if self.table is not None:
            self.table.close()
            self.table = None

    def _ask(self, prompt: str) -> str:
        self._say(prompt)
        try:
            return next(self._tokens)
        except StopIteration:
            raise _EndOfInput from None

    def _ask_int(self, prompt: str) -> int:
        token = self._ask(prompt)
        try:
            return int(token)
        except ValueError:
            raise ValueError(f"{token!r} is not a number") from None

    def _dispatch(self, choice: str) -> int | None:
        if choice == "1":
            self.create(self._ask("\nEnter table name:"))
        elif choice in ("2", "v", "V"):
            self._view()
        elif choice == "3":
            student_id = self._ask_int("\nNew student ID:")
            self.insert(student_id, self._ask("\nNew student name:"))
        elif choice == "4":
            student_id = self._ask_int("\nExisting student ID:")
            self.update(student_id, self._ask("\nChange student name:"))
        elif choice == "5":
            self.delete(self._ask_int("\nExisting student ID:"))
        elif choice in ("e", "E"):
            self._say("\nGoodbye!")
            return 0
        else:
            self._say("Unknown input!")
            return 1
        return None

    def run(self) -> int:
        """Read commands until exit or end of input; returns the exit status."""
        self._say("\nSTUDENTS DATABASE")
        try:
            while True:
                self._say(MENU)
                try:
                    status = self._dispatch(self._ask(""))
                except _EndOfInput:
                    return 0
                except (DBError, ValueError) as exc:
                    self._say(f"Error: {exc}")
                    continue
                if status is not None:
                    return status
        finally:
            self._close()


def main(argv=None) -> int:
    """Start the interactive student database on standard input and output."""
    parser = argparse.ArgumentParser(
        prog="tuplestore", description="Interactive student database."
    )
    parser.parse_args(argv)
    return StudentShell(sys.stdin, sys.stdout).run()


if __name__ == "__main__":
    sys.exit(main())