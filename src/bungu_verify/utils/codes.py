import secrets

MIN_TOKEN_BYTES = 16


def numeric_code(length: int = 4) -> str:
    """Uniformly random decimal code of exactly ``length`` digits (no leading zero)."""
    if length < 1:
        raise ValueError("code length must be positive")
    low = 10 ** (length - 1)
    high = 10**length
    return str(low + secrets.randbelow(high - low))


def url_token(nbytes: int = 32) -> str:
    """Hex token from the OS CSPRNG, at least 128 bits."""
    if nbytes < MIN_TOKEN_BYTES:
        raise ValueError(f"token must carry at least {MIN_TOKEN_BYTES} bytes of entropy")
    return secrets.token_hex(nbytes)


def code_generator(length: int = 4):
    return lambda: numeric_code(length)


def token_generator(nbytes: int = 32):
    return lambda: url_token(nbytes)
