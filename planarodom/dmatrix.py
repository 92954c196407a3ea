"""Small dense matrices with determinant and inverse by Gauss-Jordan elimination."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple, Union


class MatrixError(ArithmeticError):
    """Base class for matrix errors."""


class NotInvertibleMatrixError(MatrixError):
    """The matrix has no inverse."""


class IncompatibleMatrixError(MatrixError):
    """The operand shapes do not fit together."""


class NotSquareMatrixError(MatrixError):
    """The operation needs a square matrix."""


def _format(value: object) -> str:
    if isinstance(value, float):
        return format(value, "g")
    return str(value)


class DMatrix:
    """A dense ``rows`` x ``columns`` matrix, at least 1 x 1."""

    def __init__(self, n: int = 0, m: int = 0) -> None:
        n = max(n, 1)
        m = max(m, 1)
        self._rows: List[List[float]] = [[0.0] * m for _ in range(n)]

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[float]]) -> DMatrix:
        """Build a matrix from a list of equal-length rows."""
        data = [list(r) for r in rows]
        if not data or not data[0] or any(len(r) != len(data[0]) for r in data):
            raise IncompatibleMatrixError("rows must be non-empty and of equal length")
        matrix = cls(len(data), len(data[0]))
        matrix._rows = data
        return matrix

    @classmethod
    def identity(cls, n: int) -> DMatrix:
        """The ``n`` x ``n`` identity matrix."""
        matrix = cls(n, n)
        for i in range(matrix.rows):
            matrix._rows[i][i] = 1.0
        return matrix

    @property
    def rows(self) -> int:
        return len(self._rows)

    @property
    def columns(self) -> int:
        return len(self._rows[0])

    def __getitem__(self, key: Union[int, Tuple[int, int]]):
        if isinstance(key, tuple):
            i, j = key
            return self._rows[i][j]
        return self._rows[key]

    def __setitem__(self, key: Tuple[int, int], value: float) -> None:
        i, j = key
        self._rows[i][j] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DMatrix):
            return NotImplemented
        return self._rows == other._rows

    def tolist(self) -> List[List[float]]:
        return [list(r) for r in self._rows]

    def det(self) -> float:
        """Determinant."""
        if self.rows != self.columns:
            raise NotSquareMatrixError("determinant needs a square matrix")
        a = self.tolist()
        n = self.rows
        d = 1.0
        for i in range(n):
            k = next((k for k in range(i, n) if a[k][i] != 0), None)
            if k is None:
                return 0.0
            val = a[k][i]
            a[k] = [v / val for v in a[k]]
            d *= val
            if k != i:
                a[k], a[i] = a[i], a[k]
                d = -d
            for j in range(i + 1, n):
                tmp = a[j][i]
                if tmp != 0:
                    a[j] = [a[j][l] - tmp * a[i][l] for l in range(n)]
        return d

    def inv(self) -> DMatrix:
        """Inverse."""
        if self.rows != self.columns:
            raise NotInvertibleMatrixError("only square matrices can be inverted")
        n = self.rows
        a = self.tolist()
        b = DMatrix.identity(n).tolist()
        for i in range(n):
            k = next((k for k in range(i, n) if a[k][i] != 0), None)
            if k is None:
                raise NotInvertibleMatrixError("matrix is singular")
            val = a[k][i]
            a[k] = [v / val for v in a[k]]
            b[k] = [v / val for v in b[k]]
            if k != i:
                a[k], a[i] = a[i], a[k]
                b[k], b[i] = b[i], b[k]
            for j in range(n):
                if j != i:
                    tmp = a[j][i]
                    a[j] = [a[j][l] - tmp * a[i][l] for l in range(n)]
                    b[j] = [b[j][l] - tmp * b[i][l] for l in range(n)]
        return DMatrix.from_rows(b)

    def transpose(self) -> DMatrix:
        """Transposed copy."""
        return DMatrix.from_rows(zip(*self._rows))

    def __mul__(self, other: Union[DMatrix, float]) -> DMatrix:
        if isinstance(other, DMatrix):
            if self.columns != other.rows:
                raise IncompatibleMatrixError("inner dimensions differ")
            cols = list(zip(*other._rows))
            return DMatrix.from_rows(
                [sum(x * y for x, y in zip(row, col)) for col in cols] for row in self._rows
            )
        return DMatrix.from_rows([v * other for v in row] for row in self._rows)

    __matmul__ = __mul__

    def __rmul__(self, other: float) -> DMatrix:
        return self * other

    def _elementwise(self, other: DMatrix, op) -> DMatrix:
        if self.rows != other.rows or self.columns != other.columns:
            raise IncompatibleMatrixError("shapes differ")
        return DMatrix.from_rows(
            [op(x, y) for x, y in zip(r1, r2)] for r1, r2 in zip(self._rows, other._rows)
        )

    def __add__(self, other: DMatrix) -> DMatrix:
        return self._elementwise(other, lambda x, y: x + y)

    def __sub__(self, other: DMatrix) -> DMatrix:
        return self._elementwise(other, lambda x, y: x - y)

    def __str__(self) -> str:
        return "{" + ",".join(
            "{" + ",".join(_format(v) for v in row) + "}" for row in self._rows
        ) + "}"

    def __repr__(self) -> str:
        return f"DMatrix.from_rows({self._rows!r})"