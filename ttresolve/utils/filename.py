import re
import unicodedata
from typing import Optional


def sanitize_filename(name: Optional[str], max_length: int = 200, fallback: str = "download") -> str:
    """Sanitize filename for cross-platform compatibility and header safety"""
    name = unicodedata.normalize("NFKC", name or "")
    name = re.sub(r'[\x00-\x1f\x7f]', '', name)
    name = re.sub(r'[\\/:*?"<>|]', '_', name)

    windows_reserved = {
        'CON', 'PRN', 'AUX', 'NUL',
        'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
        'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
    }
    stem = name.split(".", 1)[0]
    if stem.upper() in windows_reserved:
        name = f"_{name}"

    name = name[:max_length].strip().strip(".")
    return name or fallback
