"""
Bloom filter used by the grid simulation.

Two cheap string hashes (DJB2 and an XOR-shift) are combined with double
hashing, index_i = (h1 + i * h2) % size, to derive the probe positions.
The hashes emulate 32-bit integer shifts so that the bit pattern for a given
sequence of keys agrees with the JavaScript version of the visualiser.
"""

import math

import config


def _to_int32(value):
    """Wraps an integer to a signed 32-bit value."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def hash1(key, size):
    """DJB2-style rolling hash: hash * 33 + char, seeded at 5381."""
    h = 5381
    for ch in key:
        # Only the shifted term is truncated; the accumulator is not.
        h = _to_int32(_to_int32(h) << 5) + h + ord(ch)
    return abs(h) % size


def hash2(key, size):
    """XOR-shift rolling hash: (hash << 3) ^ char, seeded at 0."""
    h = 0
    for ch in key:
        h = _to_int32(_to_int32(h) << 3) ^ ord(ch)
    return abs(h) % size


def estimated_false_positive_rate(size, hash_count, num_items):
    """
    Theoretical false positive probability after ``num_items`` insertions.

    p = (1 - e^(-k * n / m)) ^ k
    """
    if num_items <= 0:
        return 0.0
    return (1.0 - math.exp(-hash_count * num_items / size)) ** hash_count


class BloomFilter:
    """
    Fixed-size Bloom filter over string keys.

    Bits are packed eight to a byte. Bits are never cleared, so a key that was
    added always answers "likely present".
    """

    def __init__(self, size=config.FILTER_SIZE, hash_count=config.NUM_HASHES):
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise ValueError("size must be a positive integer")
        if (
            isinstance(hash_count, bool)
            or not isinstance(hash_count, int)
            or hash_count <= 0
        ):
            raise ValueError("hash_count must be a positive integer")

        self.size = size
        self.hash_count = hash_count
        self._bit_array = bytearray((size + 7) // 8)
        self.count = 0

    def _indices(self, key):
        if not isinstance(key, str):
            raise TypeError(f"key must be a string, got {type(key).__name__}")
        hash_a = hash1(key, self.size)
        hash_b = hash2(key, self.size)
        for i in range(self.hash_count):
            yield (hash_a + i * hash_b) % self.size

    def _set_bit(self, index):
        self._bit_array[index // 8] |= 1 << (index % 8)

    def _get_bit(self, index):
        return (self._bit_array[index // 8] & (1 << (index % 8))) != 0

    def add(self, key):
        for idx in self._indices(key):
            self._set_bit(idx)
        self.count += 1

    def update(self, keys):
        """Adds every key in ``keys``."""
        for key in keys:
            self.add(key)

    def not_in_set(self, key):
        """True if ``key`` is definitely absent, False if possibly present."""
        for idx in self._indices(key):
            if not self._get_bit(idx):
                return True
        return False

    def likely(self, key):
        return not self.not_in_set(key)

    def __contains__(self, key):
        return self.likely(key)

    @property
    def bit_array(self):
        """The underlying packed bits, for inspection."""
        return self._bit_array

    def bits_set(self):
        return sum(bin(byte).count("1") for byte in self._bit_array)

    def fill_ratio(self):
        """Fraction of the filter's bits that are set."""
        return self.bits_set() / self.size

    def estimated_false_positive_rate(self, num_items=None):
        if num_items is None:
            num_items = self.count
        return estimated_false_positive_rate(self.size, self.hash_count, num_items)
