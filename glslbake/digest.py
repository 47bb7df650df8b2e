"""
A fast and stable 64-bit fingerprint of optimized shader code.

The digest is used by the runtime as a cache key, so it only needs to be
stable and have a low collision probability. It is deliberately not a
cryptographic hash. It is a polynomial hash modulo 2**64 (vectorized with
numpy), followed by an avalanche mix. Because the multiplier is odd, changing
any single byte always changes the polynomial, and the mix is a bijection, so
it always changes the digest too.
"""

import numpy as np


__all__ = ["Digest", "compute_digest"]

_MASK = 0xFFFFFFFFFFFFFFFF
_MULTIPLIER = 0x100000001B3  # The 64-bit FNV prime
_OFFSET = 0xCBF29CE484222325  # The 64-bit FNV offset basis


class Digest:
    """A 64-bit fingerprint. ``str()`` gives 16 hex digits, ``int()`` the value."""

    __slots__ = ["_value"]

    def __init__(self, value):
        value = int(value)
        if not 0 <= value <= _MASK:
            raise ValueError(f"Digest must be a 64-bit unsigned int, not {value}")
        self._value = value

    @classmethod
    def from_hex(cls, text):
        return cls(int(text, 16))

    def __repr__(self):
        return f"<Digest {self}>"

    def __str__(self):
        return f"{self._value:016x}"

    def __int__(self):
        return self._value

    def __eq__(self, other):
        if not isinstance(other, Digest):
            return NotImplemented
        return self._value == other._value

    def __hash__(self):
        return hash(self._value)


def _as_bytes(data):
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _polynomial(data):
    # sum((b[i] + 1) * M ** (n - 1 - i)) mod 2**64. Unsigned integer arrays
    # wrap around on overflow, which is exactly the modulo we want.
    n = len(data)
    if n == 0:
        return 0
    values = np.frombuffer(data, np.uint8).astype(np.uint64) + np.uint64(1)
    powers = np.full(n, _MULTIPLIER, np.uint64)
    powers[0] = 1
    powers = np.cumprod(powers, dtype=np.uint64)
    return int(np.sum(values * powers[::-1], dtype=np.uint64))


def _mix(x):
    x ^= x >> 30
    x = (x * 0xBF58476D1CE4E5B9) & _MASK
    x ^= x >> 27
    x = (x * 0x94D049BB133111EB) & _MASK
    x ^= x >> 31
    return x


def compute_digest(vertex, fragment):
    """Compute the digest of optimized vertex code followed by fragment code.

    Accepts str (encoded as UTF-8) or bytes-like objects.
    """
    vertex = _as_bytes(vertex)
    fragment = _as_bytes(fragment)
    h = _mix(_polynomial(vertex + fragment) ^ _OFFSET)
    h = _mix(h ^ len(vertex))
    return Digest(h)
