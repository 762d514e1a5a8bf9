from __future__ import annotations

from typing import Protocol, TypeVar

A = TypeVar("A")


class AtomOpsPort(Protocol[A]):
    """原子（解）に要求する演算の契約：近似等価と線形結合"""

    __responsibility__ = "圧縮の近似一致判定と期待値の加重和に必要な演算を提供"

    def isapprox(self, a: A, b: A, *, atol: float) -> bool: ...

    def add(self, a: A, b: A) -> A: ...

    def scale(self, a: A, w: float) -> A: ...
