import base64
import math
import secrets

# base32 carries 5 bits per character
_BITS_PER_CHAR = 5


def generate_token(length: int = 32) -> str:
    """Return a random URL-safe token of exactly ``length`` characters.

    Draws just enough random bytes to cover ``length`` base32 characters,
    encodes them and cuts to size. Every character is one of the 32 symbols
    ``a-z2-7``, so each token carries ``5 * length`` bits of randomness.
    """
    if length < 1:
        raise ValueError("length must be a positive integer")

    n_bytes = math.ceil(length * _BITS_PER_CHAR / 8)
    encoded = base64.b32encode(secrets.token_bytes(n_bytes)).decode("ascii")
    return encoded.rstrip("=").lower()[:length]
