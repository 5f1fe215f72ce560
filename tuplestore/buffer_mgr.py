"""A page file on disk and a buffer pool that caches its pages in frames."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from .errors import (
    BufferPoolError,
    PageFileNotFoundError,
    ReadNonExistingPageError,
    WriteFailedError,
)

PAGE_SIZE = 4096
NO_PAGE = -1


class ReplacementStrategy(Enum):
    """Policies for choosing which frame to reuse when the pool is full."""

    FIFO = 0
    LRU = 1
    CLOCK = 2
    LFU = 3
    LRU_K = 4


_SUPPORTED = (ReplacementStrategy.FIFO, ReplacementStrategy.LRU)


def create_page_file(path) -> None:
    """Create a page file holding one empty page, replacing any existing file."""
    try:
        with open(path, "wb") as fh:
            fh.write(bytes(PAGE_SIZE))
    except OSError as exc:
        raise WriteFailedError(f"cannot create page file {path}: {exc}") from exc


class _PageFile:
    """Block-level access to a file made of fixed-size pages."""

    def __init__(self, path):
        try:
            self._fh = open(path, "r+b")
        except OSError as exc:
            raise PageFileNotFoundError(f"page file {path} not found") from exc
        self._fh.seek(0, os.SEEK_END)
        size = self._fh.tell()
        self.total_pages = -(-size // PAGE_SIZE)

    def read_block(self, page_num: int) -> bytes:
        if not 0 <= page_num < self.total_pages:
            raise ReadNonExistingPageError(f"page {page_num} does not exist")
        self._fh.seek(page_num * PAGE_SIZE)
        return self._fh.read(PAGE_SIZE).ljust(PAGE_SIZE, b"\0")

    def write_block(self, page_num: int, data) -> None:
        if not 0 <= page_num < self.total_pages:
            raise WriteFailedError(f"page {page_num} does not exist")
        try:
            self._fh.seek(page_num * PAGE_SIZE)
            self._fh.write(bytes(data[:PAGE_SIZE]).ljust(PAGE_SIZE, b"\0"))
            self._fh.flush()
        except OSError as exc:
            raise WriteFailedError(f"cannot write page {page_num}: {exc}") from exc

    def ensure_capacity(self, num_pages: int) -> None:
        if self.total_pages >= num_pages:
            return
        try:
            self._fh.seek(0, os.SEEK_END)
            self._fh.truncate(self.total_pages * PAGE_SIZE)
            self._fh.write(bytes((num_pages - self.total_pages) * PAGE_SIZE))
            self._fh.flush()
        except OSError as exc:
            raise ReadNonExistingPageError(f"cannot extend page file: {exc}") from exc
        self.total_pages = num_pages

    def close(self) -> None:
        self._fh.close()


@dataclass
class PageHandle:
    """A pinned page: its number and the frame buffer holding its bytes."""

    page_num: int
    data: bytearray


@dataclass
class Frame:
    """One slot of the buffer pool."""

    page_num: int = NO_PAGE
    pin_count: int = 0
    dirty: bool = False
    data: bytearray = field(default_factory=lambda: bytearray(PAGE_SIZE))

    def reset(self) -> None:
        self.page_num = NO_PAGE
        self.pin_count = 0
        self.dirty = False


class BufferPool:
    """Caches pages of one page file in a fixed number of frames."""

    def __init__(self, page_file, num_pages: int,
                 strategy: ReplacementStrategy = ReplacementStrategy.FIFO):
        if num_pages <= 0:
            raise BufferPoolError("a buffer pool needs at least one frame")
        if strategy not in _SUPPORTED:
            raise BufferPoolError(f"replacement strategy {strategy.name} is not supported")
        self._file = _PageFile(page_file)
        self.page_file = page_file
        self.num_pages = num_pages
        self.strategy = strategy
        self._frames = [Frame() for _ in range(num_pages)]
        self._front = 0
        self._rear = -1
        self._frame_count = 0
        self._lru: list[int] = []
        self.num_read = 0
        self.num_write = 0
        self._closed = False

    @property
    def frames(self) -> tuple[Frame, ...]:
        """The frames of the pool, in frame order."""
        return tuple(self._frames)

    @property
    def closed(self) -> bool:
        return self._closed

    def _find(self, page_num: int) -> Frame | None:
        return next((f for f in self._frames if f.page_num == page_num), None)

    def _frame_of(self, page: PageHandle) -> Frame:
        frame = self._find(page.page_num)
        if frame is None:
            raise BufferPoolError(f"page {page.page_num} is not in the buffer pool")
        return frame

    def _is_full(self) -> bool:
        return self._frame_count == self.num_pages

    def _load(self, frame: Frame, page_num: int) -> PageHandle:
        self._file.ensure_capacity(page_num + 1)
        frame.data[:] = self._file.read_block(page_num)
        self.num_read += 1
        frame.page_num = page_num
        frame.pin_count = 1
        frame.dirty = False
        self._frame_count += 1
        return PageHandle(page_num, frame.data)

    def _write_back(self, frame: Frame) -> None:
        self._file.write_block(frame.page_num, frame.data)
        self.num_write += 1

    def _evict_fifo(self) -> None:
        if not any(f.pin_count == 0 for f in self._frames):
            raise BufferPoolError("all frames are pinned")
        if self._frames[self._front].pin_count > 0:
            while self._frames[self._front].pin_count > 0:
                self._front = (self._front + 1) % self.num_pages
            self._rear = self._front - 1
        frame = self._frames[self._front]
        if frame.dirty:
            self._write_back(frame)
        self._front = (self._front + 1) % self.num_pages
        self._frame_count -= 1
        frame.reset()

    def _pin_fifo(self, page_num: int) -> PageHandle:
        if self._is_full():
            self._evict_fifo()
        self._rear = (self._rear + 1) % self.num_pages
        return self._load(self._frames[self._rear], page_num)

    def _pin_lru(self, page_num: int) -> PageHandle:
        if self._is_full():
            victim = next(
                (p for p in self._lru if self._find(p).pin_count == 0), None
            )
            if victim is None:
                raise BufferPoolError("all frames are pinned")
            frame = self._find(victim)
            if frame.dirty:
                self._write_back(frame)
            frame.reset()
            self._frame_count -= 1
            self._lru.remove(victim)
        else:
            frame = next(f for f in self._frames if f.page_num == NO_PAGE)
        handle = self._load(frame, page_num)
        self._lru.append(page_num)
        return handle

    def pin_page(self, page_num: int) -> PageHandle:
        """Pin a page, reading it from disk if it is not cached."""
        if self._closed:
            raise BufferPoolError("buffer pool is shut down")
        if page_num < 0:
            raise BufferPoolError(f"invalid page number {page_num}")
        frame = self._find(page_num)
        if frame is not None:
            frame.pin_count += 1
            if self.strategy is ReplacementStrategy.LRU:
                self._lru.remove(page_num)
                self._lru.append(page_num)
            return PageHandle(page_num, frame.data)
        if self.strategy is ReplacementStrategy.FIFO:
            return self._pin_fifo(page_num)
        return self._pin_lru(page_num)

    def mark_dirty(self, page: PageHandle) -> None:
        """Mark a cached page as modified."""
        if self._closed:
            return
        self._frame_of(page).dirty = True

    def unpin_page(self, page: PageHandle) -> None:
        """Release one pin; a dirty page left unpinned is written to disk."""
        if self._closed:
            return
        frame = self._frame_of(page)
        if frame.pin_count <= 0:
            raise BufferPoolError(f"page {page.page_num} is not pinned")
        frame.pin_count -= 1
        if frame.pin_count == 0 and frame.dirty:
            self.force_page(page)

    def force_page(self, page: PageHandle) -> None:
        """Write the current content of a cached page to disk."""
        if self._closed:
            return
        frame = self._frame_of(page)
        self._file.write_block(frame.page_num, frame.data)

    def force_flush_pool(self) -> None:
        """Write every dirty, unpinned page to disk and mark it clean."""
        if self._closed:
            return
        for frame in self._frames:
            if frame.page_num == NO_PAGE:
                continue
            if frame.dirty and frame.pin_count == 0:
                self._write_back(frame)
                frame.dirty = False

    def shutdown(self) -> None:
        """Flush dirty pages and release the page file."""
        if self._closed:
            return
        self.force_flush_pool()
        self._file.close()
        self._closed = True

    def __enter__(self) -> "BufferPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()