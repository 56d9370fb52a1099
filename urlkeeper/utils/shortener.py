"""Short key generation utility

This module provides a random short key generator for URL slugs.

Classes:
    KeyGenerator(length=6, salt='urlkeeper', seed=None):
        Thread-safe generator of fixed-length Base62 keys.

Example:
    >>> from urlkeeper.utils import KeyGenerator
    >>> generator = KeyGenerator()
    >>> generator.generate()
    'qT3xZb'
"""

import os
import random
import threading
import time

import xxhash

from urlkeeper.constants import Shortener


ALPHABET = Shortener.ALPHABET
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits


class KeyGenerator:
    """Generate random, fixed-length Base62 short keys.

    Every character is drawn independently and uniformly from the 62-symbol
    alphabet. The random source is a private `random.Random` seeded exactly
    once at construction; calls never reseed it. Draws are serialized by a
    lock, so one generator can be shared across threads.

    Unless an explicit `seed` is given, the seed is the xxhash of the salt,
    the current time in nanoseconds, the process id and a few bytes of OS
    entropy. Restarted processes therefore never replay an earlier sequence.

    Args:
        length (int, optional):
            Length of generated keys. Defaults to 6.

        salt (str, optional):
            String mixed into the derived seed. Defaults to "urlkeeper".

        seed (int | None, optional):
            Explicit seed for reproducible sequences (tests). Defaults to None.

    NOTE:
        - Collisions with existing keys are possible. Callers must insert
          with an atomic put-if-absent and retry with a fresh key.
        - This is not a cryptographic token generator; keys are only meant
          to be hard to collide, not hard to guess.
    """

    def __init__(self, length: int = Shortener.KEY_LENGTH, salt: str = Shortener.DEFAULT_SALT, seed: int | None = None):
        if not isinstance(length, int) or isinstance(length, bool):
            raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
        if length < 1:
            raise ValueError(f'Length must be a positive integer (given value: {length}).')
        if not isinstance(salt, str):
            raise TypeError(f'Salt must be of type string (given type: {type(salt)}).')
        if not salt:
            raise ValueError(f'Salt must be a non-empty string (given value: {salt}).')

        self.length = length
        self._random = random.Random(seed if seed is not None else self._derive_seed(salt))  # noqa: S311
        self._lock = threading.Lock()

    @staticmethod
    def _derive_seed(salt: str) -> int:
        # NOTE: uses ultra-fast xxhash to fold the seed material into 64 bits
        material = f'{salt}:{time.time_ns()}:{os.getpid()}:{os.urandom(16).hex()}'
        return xxhash.xxh64_intdigest(material)

    def generate(self) -> str:
        """Return a new candidate short key

        Returns:
            str: `length` characters from the Base62 alphabet [a-zA-Z0-9].

        Example:
            >>> key = KeyGenerator(seed=42).generate()
            >>> len(key), key.isalnum()
            (6, True)
        """
        with self._lock:
            return ''.join(self._random.choice(ALPHABET) for _ in range(self.length))
