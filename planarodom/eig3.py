"""Eigen decomposition of small symmetric real matrices.

Householder reduction to tridiagonal form followed by the implicit QL
algorithm, as in the EISPACK routines ``tred2`` and ``tql2``.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

Matrix = List[List[float]]

_EPS = 2.0 ** -52


def _tred2(v: Matrix, d: List[float], e: List[float]) -> None:
    """Reduce ``v`` in place to tridiagonal form, keeping the transformation."""
    n = len(v)
    d[:] = v[n - 1][:]

    for i in range(n - 1, 0, -1):
        scale = sum(abs(d[k]) for k in range(i))
        h = 0.0
        if scale == 0.0:
            e[i] = d[i - 1]
            for j in range(i):
                d[j] = v[i - 1][j]
                v[i][j] = 0.0
                v[j][i] = 0.0
        else:
            for k in range(i):
                d[k] /= scale
                h += d[k] * d[k]
            f = d[i - 1]
            g = math.sqrt(h)
            if f > 0:
                g = -g
            e[i] = scale * g
            h -= f * g
            d[i - 1] = f - g
            for j in range(i):
                e[j] = 0.0

            for j in range(i):
                f = d[j]
                v[j][i] = f
                g = e[j] + v[j][j] * f
                for k in range(j + 1, i):
                    g += v[k][j] * d[k]
                    e[k] += v[k][j] * f
                e[j] = g
            f = 0.0
            for j in range(i):
                e[j] /= h
                f += e[j] * d[j]
            hh = f / (h + h)
            for j in range(i):
                e[j] -= hh * d[j]
            for j in range(i):
                f = d[j]
                g = e[j]
                for k in range(j, i):
                    v[k][j] -= f * e[k] + g * d[k]
                d[j] = v[i - 1][j]
                v[i][j] = 0.0
        d[i] = h

    for i in range(n - 1):
        v[n - 1][i] = v[i][i]
        v[i][i] = 1.0
        h = d[i + 1]
        if h != 0.0:
            for k in range(i + 1):
                d[k] = v[k][i + 1] / h
            for j in range(i + 1):
                g = sum(v[k][i + 1] * v[k][j] for k in range(i + 1))
                for k in range(i + 1):
                    v[k][j] -= g * d[k]
        for k in range(i + 1):
            v[k][i + 1] = 0.0
    for j in range(n):
        d[j] = v[n - 1][j]
        v[n - 1][j] = 0.0
    v[n - 1][n - 1] = 1.0
    e[0] = 0.0


def _tql2(v: Matrix, d: List[float], e: List[float]) -> None:
    """Diagonalise the tridiagonal matrix and sort eigenpairs ascending."""
    n = len(v)
    for i in range(1, n):
        e[i - 1] = e[i]
    e[n - 1] = 0.0

    f = 0.0
    tst1 = 0.0
    for l in range(n):
        tst1 = max(tst1, abs(d[l]) + abs(e[l]))
        m = l
        while m < n and abs(e[m]) > _EPS * tst1:
            m += 1

        if m > l:
            while True:
                g = d[l]
                p = (d[l + 1] - g) / (2.0 * e[l])
                r = math.hypot(p, 1.0)
                if p < 0:
                    r = -r
                d[l] = e[l] / (p + r)
                d[l + 1] = e[l] * (p + r)
                dl1 = d[l + 1]
                h = g - d[l]
                for i in range(l + 2, n):
                    d[i] -= h
                f += h

                p = d[m]
                c = c2 = c3 = 1.0
                el1 = e[l + 1]
                s = s2 = 0.0
                for i in range(m - 1, l - 1, -1):
                    c3 = c2
                    c2 = c
                    s2 = s
                    g = c * e[i]
                    h = c * p
                    r = math.hypot(p, e[i])
                    e[i + 1] = s * r
                    s = e[i] / r
                    c = p / r
                    p = c * d[i] - s * g
                    d[i + 1] = h + s * (c * g + s * d[i])
                    for row in v:
                        h = row[i + 1]
                        row[i + 1] = s * row[i] + c * h
                        row[i] = c * row[i] - s * h
                p = -s * s2 * c3 * el1 * e[l] / dl1
                e[l] = s * p
                d[l] = c * p
                if abs(e[l]) <= _EPS * tst1:
                    break
        d[l] += f
        e[l] = 0.0

    for i in range(n - 1):
        k = i
        p = d[i]
        for j in range(i + 1, n):
            if d[j] < p:
                k = j
                p = d[j]
        if k != i:
            d[k] = d[i]
            d[i] = p
            for row in v:
                row[i], row[k] = row[k], row[i]


def eigen_decomposition(matrix: Sequence[Sequence[float]]) -> Tuple[Matrix, List[float]]:
    """Decompose a symmetric matrix.

    Returns ``(vectors, values)``: the eigenvectors are the columns of
    ``vectors`` and ``values`` holds the matching eigenvalues in ascending
    order.
    """
    v = [[float(x) for x in row] for row in matrix]
    n = len(v)
    if n == 0 or any(len(row) != n for row in v):
        raise ValueError("eigen_decomposition needs a non-empty square matrix")
    d = [0.0] * n
    e = [0.0] * n
    _tred2(v, d, e)
    _tql2(v, d, e)
    return v, d