"""Page-based record manager with a buffer pool, fixed-size records and filtered scans."""

__version__ = "0.1.0"
__all__ = ["errors", "buffer_mgr", "buffer_stats", "records", "expr", "table", "cli"]