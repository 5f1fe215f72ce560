import pytest

from tuplestore.buffer_mgr import (
    NO_PAGE,
    PAGE_SIZE,
    BufferPool,
    PageHandle,
    ReplacementStrategy,
    create_page_file,
)
from tuplestore.errors import BufferPoolError, PageFileNotFoundError


@pytest.fixture
def page_file(tmp_path):
    path = tmp_path / "pages.bin"
    create_page_file(path)
    return path


def contents(pool):
    return [f.page_num for f in pool.frames]


def test_create_page_file_holds_one_empty_page(page_file):
    assert page_file.read_bytes() == bytes(PAGE_SIZE)


def test_missing_file_raises(tmp_path):
    with pytest.raises(PageFileNotFoundError):
        BufferPool(tmp_path / "absent.bin", 3)


def test_zero_frames_raises(page_file):
    with pytest.raises(BufferPoolError):
        BufferPool(page_file, 0)


def test_unsupported_strategy_raises(page_file):
    with pytest.raises(BufferPoolError):
        BufferPool(page_file, 3, ReplacementStrategy.CLOCK)


def test_new_pool_is_empty(page_file):
    with BufferPool(page_file, 3) as pool:
        assert contents(pool) == [NO_PAGE] * 3
        assert [f.pin_count for f in pool.frames] == [0, 0, 0]
        assert pool.num_read == 0 and pool.num_write == 0


def test_pin_reads_page(page_file):
    with BufferPool(page_file, 3) as pool:
        page = pool.pin_page(0)
        assert page.page_num == 0
        assert bytes(page.data) == bytes(PAGE_SIZE)
        assert pool.frames[0].pin_count == 1
        assert pool.num_read == 1


def test_hit_does_not_read_again(page_file):
    with BufferPool(page_file, 3) as pool:
        first = pool.pin_page(0)
        second = pool.pin_page(0)
        assert pool.num_read == 1
        assert pool.frames[0].pin_count == 2
        assert first.data is second.data


def test_negative_page_raises(page_file):
    with BufferPool(page_file, 3) as pool:
        with pytest.raises(BufferPoolError):
            pool.pin_page(-1)


def test_pin_beyond_end_extends_file(page_file):
    with BufferPool(page_file, 3) as pool:
        page = pool.pin_page(5)
        pool.unpin_page(page)
    assert page_file.stat().st_size == 6 * PAGE_SIZE


def test_dirty_unpin_writes_to_disk(page_file):
    with BufferPool(page_file, 3) as pool:
        page = pool.pin_page(0)
        page.data[:5] = b"hello"
        pool.mark_dirty(page)
        pool.unpin_page(page)
    assert page_file.read_bytes()[:5] == b"hello"


def test_content_survives_new_pool(page_file):
    with BufferPool(page_file, 2) as pool:
        page = pool.pin_page(3)
        page.data[:4] = b"data"
        pool.mark_dirty(page)
        pool.unpin_page(page)
    with BufferPool(page_file, 2, ReplacementStrategy.LRU) as pool:
        assert bytes(pool.pin_page(3).data[:4]) == b"data"


def test_flush_writes_dirty_unpinned(page_file):
    with BufferPool(page_file, 3) as pool:
        page = pool.pin_page(0)
        pool.mark_dirty(page)
        pool.unpin_page(page)
        assert pool.frames[0].dirty
        pool.force_flush_pool()
        assert pool.num_write == 1
        assert not pool.frames[0].dirty


def test_flush_skips_pinned(page_file):
    with BufferPool(page_file, 3) as pool:
        page = pool.pin_page(0)
        pool.mark_dirty(page)
        pool.force_flush_pool()
        assert pool.num_write == 0
        assert pool.frames[0].dirty


def test_mark_dirty_unknown_page_raises(page_file):
    with BufferPool(page_file, 3) as pool:
        with pytest.raises(BufferPoolError):
            pool.mark_dirty(PageHandle(7, bytearray(PAGE_SIZE)))


def test_unpin_unpinned_raises(page_file):
    with BufferPool(page_file, 3) as pool:
        page = pool.pin_page(0)
        pool.unpin_page(page)
        with pytest.raises(BufferPoolError):
            pool.unpin_page(page)


@pytest.mark.parametrize("strategy", list(ReplacementStrategy)[:2])
def test_all_pinned_raises(page_file, strategy):
    with BufferPool(page_file, 2, strategy) as pool:
        pool.pin_page(0)
        pool.pin_page(1)
        with pytest.raises(BufferPoolError):
            pool.pin_page(2)
        assert sorted(contents(pool)) == [0, 1]


def test_fifo_replaces_oldest(page_file):
    with BufferPool(page_file, 3) as pool:
        for n in range(4):
            pool.unpin_page(pool.pin_page(n))
        assert contents(pool) == [3, 1, 2]
        assert pool.num_read == 4


def test_fifo_skips_pinned_front(page_file):
    with BufferPool(page_file, 3) as pool:
        pool.pin_page(0)
        for n in (1, 2, 3):
            pool.unpin_page(pool.pin_page(n))
        assert contents(pool) == [0, 3, 2]


def test_lru_replaces_least_recent(page_file):
    with BufferPool(page_file, 3, ReplacementStrategy.LRU) as pool:
        for n in range(3):
            pool.unpin_page(pool.pin_page(n))
        pool.unpin_page(pool.pin_page(0))
        pool.unpin_page(pool.pin_page(3))
        assert contents(pool) == [0, 3, 2]


def test_eviction_of_dirty_page_counts_write(page_file):
    with BufferPool(page_file, 1) as pool:
        page = pool.pin_page(0)
        page.data[:1] = b"x"
        pool.mark_dirty(page)
        pool.unpin_page(page)
        pool.unpin_page(pool.pin_page(1))
        assert pool.num_write == 1
    assert page_file.read_bytes()[:1] == b"x"


def test_shutdown_closes_pool(page_file):
    pool = BufferPool(page_file, 2)
    pool.shutdown()
    assert pool.closed
    with pytest.raises(BufferPoolError):
        pool.pin_page(0)