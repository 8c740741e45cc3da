import hashlib

def md5_hex(data: str) -> str:
    """Hex md5 digest; used for identifiers that only need to look plausible"""
    return hashlib.md5(data.encode()).hexdigest()
