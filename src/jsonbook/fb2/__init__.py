"""FictionBook 2 source model and reader."""

from .reader import FB2ReadError, read_fb2, read_fb2_bytes

__all__ = ["FB2ReadError", "read_fb2", "read_fb2_bytes"]
