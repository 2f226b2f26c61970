from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

MAX_SYMBOLS = 32


def bit(s: int) -> int:
    return 1 << s


@dataclass(frozen=True)
class CandidateSet:
    """
    Immutable bitmask of candidate symbols:
    - bit i set <=> symbol i is still possible
    - every "clear"/"set" returns a new instance
    """

    bits: int = 0

    @classmethod
    def from_bits(cls, mask: int) -> "CandidateSet":
        if mask < 0:
            raise ValueError(f"Candidate mask must be non-negative, got {mask}")
        return cls(mask)

    @classmethod
    def of(cls, *symbols: int) -> "CandidateSet":
        mask = 0
        for s in symbols:
            if s < 0:
                raise ValueError(f"Negative symbol {s}")
            mask |= bit(s)
        return cls(mask)

    @classmethod
    def full(cls, symbol_count: int) -> "CandidateSet":
        return cls((1 << symbol_count) - 1)

    def to_bits(self) -> int:
        return self.bits

    # ---------- set algebra ----------
    def union(self, other: "CandidateSet") -> "CandidateSet":
        return CandidateSet(self.bits | other.bits)

    def intersect(self, other: "CandidateSet") -> "CandidateSet":
        return CandidateSet(self.bits & other.bits)

    def subtract(self, other: "CandidateSet") -> "CandidateSet":
        return CandidateSet(self.bits & ~other.bits)

    def with_symbol(self, symbol: int) -> "CandidateSet":
        return CandidateSet(self.bits | bit(symbol))

    def without(self, symbol: int) -> "CandidateSet":
        if symbol < 0:
            return self
        return CandidateSet(self.bits & ~bit(symbol))

    __or__ = union
    __and__ = intersect
    __sub__ = subtract

    # ---------- queries ----------
    def contains(self, symbol: int) -> bool:
        if not isinstance(symbol, int) or symbol < 0:
            return False
        return bool(self.bits >> symbol & 1)

    def set_symbols(self) -> Iterator[int]:
        mask = self.bits
        s = 0
        while mask:
            if mask & 1:
                yield s
            mask >>= 1
            s += 1

    def count(self) -> int:
        return self.bits.bit_count()

    def is_empty(self) -> bool:
        return self.bits == 0

    def first(self) -> Optional[int]:
        return next(self.set_symbols(), None)

    def issubset(self, other: "CandidateSet") -> bool:
        return self.bits & ~other.bits == 0

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, int) and self.contains(symbol)

    def __iter__(self) -> Iterator[int]:
        return self.set_symbols()

    def __len__(self) -> int:
        return self.count()

    def __str__(self) -> str:
        return "{" + ", ".join(str(s) for s in self.set_symbols()) + "}"


def union_all(sets: Iterable[CandidateSet]) -> CandidateSet:
    mask = 0
    for cs in sets:
        mask |= cs.bits
    return CandidateSet(mask)
