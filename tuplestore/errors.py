"""Error codes and exceptions raised by the storage, buffer and record layers."""

from __future__ import annotations

from enum import IntEnum

DEFAULT_MESSAGE = "No error message provided"


class ErrorCode(IntEnum):
    """Numeric codes that identify each kind of failure."""

    OK = 0
    FILE_NOT_FOUND = 1
    FILE_HANDLE_NOT_INIT = 2
    WRITE_FAILED = 3
    READ_NON_EXISTING_PAGE = 4

    RM_COMPARE_VALUE_OF_DIFFERENT_DATATYPE = 200
    RM_EXPR_RESULT_IS_NOT_BOOLEAN = 201
    RM_BOOLEAN_EXPR_ARG_IS_NOT_BOOLEAN = 202
    RM_NO_MORE_TUPLES = 203
    RM_NO_PRINT_FOR_DATATYPE = 204
    RM_UNKNOWN_DATATYPE = 205

    ERROR = 400
    PARAMS_ERROR = 401
    TABLE_EXISTS = 402
    TABLE_NOT_EXISTS = 403
    TABLE_CREATE_FAILED = 404
    ALLOC_MEM_FAIL = 405
    DATATYPE_UNDEFINED = 406
    DATATYPE_MISMATCH = 407
    RECORD_NOT_FOUND = 408


class DBError(Exception):
    """Base class of every error the package raises."""

    code: ErrorCode = ErrorCode.ERROR

    def __init__(self, message: str | None = None, code: ErrorCode | None = None):
        super().__init__(message or DEFAULT_MESSAGE)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message or DEFAULT_MESSAGE


class PageFileNotFoundError(DBError):
    """The page file does not exist or cannot be opened."""

    code = ErrorCode.FILE_NOT_FOUND


class WriteFailedError(DBError):
    """A page could not be written to the page file."""

    code = ErrorCode.WRITE_FAILED


class ReadNonExistingPageError(DBError):
    """A page outside the page file was requested."""

    code = ErrorCode.READ_NON_EXISTING_PAGE


class BufferPoolError(DBError):
    """The buffer pool cannot carry out the request."""

    code = ErrorCode.ERROR


class TableExistsError(DBError):
    """A table with that name already exists."""

    code = ErrorCode.TABLE_EXISTS


class TableNotFoundError(DBError):
    """No table with that name exists."""

    code = ErrorCode.TABLE_NOT_EXISTS


class DataTypeMismatchError(DBError):
    """A value does not have the data type its attribute requires."""

    code = ErrorCode.DATATYPE_MISMATCH


class ComparisonTypeError(DBError):
    """Two values of different data types were compared."""

    code = ErrorCode.RM_COMPARE_VALUE_OF_DIFFERENT_DATATYPE


class NotBooleanError(DBError):
    """A boolean operator was given a non-boolean argument."""

    code = ErrorCode.RM_BOOLEAN_EXPR_ARG_IS_NOT_BOOLEAN


class RecordNotFoundError(DBError):
    """No record is stored under the requested identifier."""

    code = ErrorCode.RECORD_NOT_FOUND


def format_error(error: DBError | ErrorCode | int) -> str:
    """Render an error as ``EC (code)`` followed by its message, if it has one."""
    if isinstance(error, DBError):
        code = int(error.code)
        if error.message:
            return f'EC ({code}), "{error.message}"'
        return f"EC ({code})"
    return f"EC ({int(error)})"