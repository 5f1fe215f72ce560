"""Statistics and printable views of a buffer pool and its pages."""

from __future__ import annotations

from .buffer_mgr import BufferPool, PageHandle, ReplacementStrategy

_STRATEGY_NAMES = {
    ReplacementStrategy.FIFO: "FIFO",
    ReplacementStrategy.LRU: "LRU",
    ReplacementStrategy.CLOCK: "CLOCK",
    ReplacementStrategy.LFU: "LFU",
    ReplacementStrategy.LRU_K: "LRU-K",
}


def frame_contents(pool: BufferPool) -> list[int]:
    """Page number held by each frame, ``NO_PAGE`` for an empty frame."""
    return [frame.page_num for frame in pool.frames]


def dirty_flags(pool: BufferPool) -> list[bool]:
    """Whether the page in each frame has been modified."""
    return [frame.dirty for frame in pool.frames]


def fix_counts(pool: BufferPool) -> list[int]:
    """Pin count of each frame; empty frames have a count of zero."""
    return [frame.pin_count for frame in pool.frames]


def num_read_io(pool: BufferPool) -> int:
    """Number of pages read from disk since the pool was created."""
    return pool.num_read


def num_write_io(pool: BufferPool) -> int:
    """Number of pages written to disk since the pool was created."""
    return pool.num_write


def pool_content(pool: BufferPool) -> str:
    """Frames as ``[page dirty count]`` entries separated by commas."""
    return ",".join(
        f"[{frame.page_num}{'x' if frame.dirty else ' '}{frame.pin_count}]"
        for frame in pool.frames
    )


def describe_pool(pool: BufferPool) -> str:
    """The pool's strategy and size followed by the content of its frames."""
    name = _STRATEGY_NAMES.get(pool.strategy, str(pool.strategy.value))
    return f"{{{name} {pool.num_pages}}}: {pool_content(pool)}"


def page_content(page: PageHandle) -> str:
    """Hex dump of a page: a space after every 8 bytes, a newline after every 64."""
    parts = [f"[Page {page.page_num}]\n"]
    for position, byte in enumerate(page.data, start=1):
        parts.append(f"{byte:02X}")
        if position % 8 == 0:
            parts.append(" ")
        if position % 64 == 0:
            parts.append("\n")
    return "".join(parts)