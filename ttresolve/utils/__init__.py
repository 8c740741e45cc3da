from .filename import sanitize_filename
from .hash import md5_hex

__all__ = ["md5_hex", "sanitize_filename"]
