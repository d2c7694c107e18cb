"""
rng.py
------

Per-trial random source.

A render trial hands exactly one ``RNG`` to the sketch. It is the only place
the sketch may draw randomness from, so replaying a seed replays the picture.
Two interchangeable backends are available:

    stdlib   random.Random               (default)
    numpy    numpy.random.Generator      (use_numpy=True)

Scalar draws come back as plain Python numbers on either backend; sized
NumPy draws (``size=...``) come back as arrays.
"""

from __future__ import annotations

__all__ = ["RNGBackend", "RNG", "MAX_SEED", "check_seed"]

import random
import threading
from numbers import Integral
from typing import Any, MutableSequence, Optional, Sequence, TypeAlias, TypeVar, Union

import numpy as np

RNGBackend: TypeAlias = Union[random.Random, np.random.Generator]
T = TypeVar("T")

MAX_SEED = 2**64 - 1


def check_seed(seed: Any) -> int:
    """Return ``seed`` as an int; reject non-integers and values outside u64."""
    if isinstance(seed, bool) or not isinstance(seed, Integral):
        raise TypeError(f"seed must be an integer, not {type(seed).__name__}")
    if seed < 0 or seed > MAX_SEED:
        raise ValueError(f"seed must be in [0, 2**64 - 1], got {seed}")
    return int(seed)


def _scalar(value: Any) -> Any:
    # NumPy scalar -> Python number; arrays pass through
    if isinstance(value, np.generic):
        return value.item()
    return value


class RNG:
    """
    Seeded generator exposing one API over both backends.

    Attributes:
        seed_value: Seed the generator was built from.
    """

    def __init__(self, seed: int, use_numpy: bool = False):
        self.seed_value = check_seed(seed)
        self._use_numpy = bool(use_numpy)
        self._lock = threading.Lock()
        self._rng: RNGBackend = (
            np.random.default_rng(self.seed_value) if self._use_numpy
            else random.Random(self.seed_value)
        )
        self._np: Optional[np.random.Generator] = None  # created by as_numpy()

    @property
    def use_numpy(self) -> bool:
        return self._use_numpy

    # -----------------------------------------------------------------
    # Draws
    # -----------------------------------------------------------------
    def random(self, **kw) -> float:
        """Float in [0, 1)."""
        with self._lock:
            return _scalar(self._rng.random(**kw))

    def randint(self, low: int, high: int, **kw) -> int:
        """Integer in [low, high], both ends included."""
        with self._lock:
            if self._use_numpy:
                return _scalar(self._rng.integers(low, high, endpoint=True, **kw))
            return self._rng.randint(low, high)

    def randrange(self, start: int, stop: int = None, **kw) -> int:
        """Integer in [start, stop); ``randrange(n)`` draws from [0, n)."""
        if stop is None:
            start, stop = 0, start
        with self._lock:
            if self._use_numpy:
                return _scalar(self._rng.integers(start, stop, **kw))
            return self._rng.randrange(start, stop)

    def uniform(self, low: float = 0.0, high: float = 1.0, **kw) -> Union[float, np.ndarray]:
        with self._lock:
            return _scalar(self._rng.uniform(low, high, **kw))

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise IndexError("cannot choose from an empty sequence")
        with self._lock:
            if self._use_numpy:
                return seq[int(self._rng.integers(len(seq)))]
            return self._rng.choice(seq)

    def normal(self, mu: float = 0.0, sigma: float = 1.0) -> float:
        with self._lock:
            if self._use_numpy:
                return float(self._rng.normal(mu, sigma))
            return self._rng.normalvariate(mu, sigma)

    def normal3s(self) -> float:
        """Normal draw with sigma = 1/3, clipped to [-1, 1] (about 0.3% of draws clip)."""
        return min(1.0, max(-1.0, self.normal(0.0, 1.0 / 3.0)))

    def shuffle(self, seq: MutableSequence[T]) -> MutableSequence[T]:
        """Shuffle ``seq`` in place and return it."""
        with self._lock:
            if self._use_numpy:
                seq[:] = [seq[i] for i in self._rng.permutation(len(seq))]
            else:
                self._rng.shuffle(seq)
        return seq

    # -----------------------------------------------------------------
    # State
    # -----------------------------------------------------------------
    def getstate(self) -> Any:
        with self._lock:
            return self._rng.bit_generator.state if self._use_numpy else self._rng.getstate()

    def setstate(self, state: Any) -> None:
        with self._lock:
            if self._use_numpy:
                self._rng.bit_generator.state = state
            else:
                self._rng.setstate(state)

    def as_numpy(self) -> np.random.Generator:
        """
        NumPy Generator for vectorized sampling.

        On the NumPy backend this is the live generator. On the stdlib backend
        it is a companion generator seeded with ``seed_value``, created on the
        first call and returned by every later call, so successive draws
        continue one stream.
        """
        if self._use_numpy:
            return self._rng
        with self._lock:
            if self._np is None:
                self._np = np.random.default_rng(self.seed_value)
            return self._np

    def __repr__(self) -> str:
        return f"<RNG backend={'numpy' if self._use_numpy else 'stdlib'} seed={self.seed_value}>"
