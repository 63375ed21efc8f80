"""Operation counting for dense matrix multiplication.

For ``A (m x n) @ B (n x p)`` every one of the ``m * p`` output elements is a
dot product of length ``n``: ``n`` multiplications and ``n - 1`` additions.

Counts are plain Python ``int`` values, so they never overflow. Precision is
only lost later, when :func:`features.execution_time.estimate_time` divides
by a throughput in ``float`` (exact up to ``2**53`` FLOPs).
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any

from .errors import ShapeError


def _is_integral(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class MatrixShape:
    """Dimensions of a 2-D matrix."""

    rows: int
    cols: int

    @classmethod
    def from_inputs(cls, rows: Any, cols: Any) -> "MatrixShape":
        """Build a shape from raw widget values.

        Integral floats such as ``4.0`` are accepted; anything else that is
        not a positive whole number raises :class:`ShapeError`.
        """

        dims = []
        for label, value in (("rows", rows), ("cols", cols)):
            if isinstance(value, bool):
                raise ShapeError(f"{label} must be a positive integer, got {value!r}")
            if _is_integral(value):
                dims.append(int(value))
                continue
            try:
                as_float = float(value)
            except (TypeError, ValueError):
                raise ShapeError(f"{label} must be a positive integer, got {value!r}") from None
            if not as_float.is_integer():
                raise ShapeError(f"{label} must be a positive integer, got {value!r}")
            dims.append(int(as_float))
        shape = cls(rows=dims[0], cols=dims[1])
        if not shape.is_valid():
            raise ShapeError(f"Matrix dimensions must be at least 1, got {shape}", shape)
        return shape

    def is_valid(self) -> bool:
        return (
            _is_integral(self.rows)
            and _is_integral(self.cols)
            and self.rows >= 1
            and self.cols >= 1
        )

    @property
    def elements(self) -> int:
        return self.rows * self.cols

    def __str__(self) -> str:
        return f"{self.rows}×{self.cols}"


@dataclass(frozen=True)
class FlopsResult:
    """Operation counts of one matrix product."""

    total_flops: int
    multiplications: int
    additions: int
    output_shape: MatrixShape


def compute_flops(a: MatrixShape, b: MatrixShape) -> FlopsResult:
    """Count the FLOPs of ``a @ b``.

    Raises
    ------
    ShapeError
        If any dimension is below 1 or ``a.cols != b.rows``.
    """

    if not (a.is_valid() and b.is_valid()):
        raise ShapeError(
            f"Matrix dimensions must be positive integers, got A={a}, B={b}", a, b
        )
    if a.cols != b.rows:
        raise ShapeError(
            f"Cannot multiply A ({a}) by B ({b}): A has {a.cols} columns but B has {b.rows} rows",
            a,
            b,
        )

    m, n, p = int(a.rows), int(a.cols), int(b.cols)
    multiplications = m * p * n
    additions = m * p * max(n - 1, 0)
    return FlopsResult(
        total_flops=multiplications + additions,
        multiplications=multiplications,
        additions=additions,
        output_shape=MatrixShape(rows=m, cols=p),
    )


__all__ = ["FlopsResult", "MatrixShape", "compute_flops"]
