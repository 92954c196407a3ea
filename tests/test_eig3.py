import numpy as np
import pytest

from planarodom.eig3 import eigen_decomposition


def _reconstruct(vectors, values):
    v = np.array(vectors)
    return v @ np.diag(values) @ v.T


def test_diagonal_covariance_sorted():
    vectors, values = eigen_decomposition([[1.0, 0, 0], [0, 0.01, 0], [0, 0, 0.01]])
    assert values == pytest.approx([0.01, 0.01, 1.0])
    assert abs(vectors[0][2]) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "matrix",
    [
        [[2.0, 1.0, 0.0], [1.0, 2.0, 1.0], [0.0, 1.0, 2.0]],
        [[4.0, -2.0, 0.5], [-2.0, 3.0, 0.1], [0.5, 0.1, 1.0]],
        [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
        [[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 0.0, 5.0]],
    ],
)
def test_reconstruction_and_orthonormality(matrix):
    vectors, values = eigen_decomposition(matrix)
    assert np.allclose(_reconstruct(vectors, values), np.array(matrix), atol=1e-10)
    v = np.array(vectors)
    assert np.allclose(v.T @ v, np.eye(3), atol=1e-10)
    assert values == sorted(values)


def test_matches_numpy_eigenvalues():
    matrix = [[3.0, 0.2, -0.4], [0.2, 1.5, 0.7], [-0.4, 0.7, 2.2]]
    _, values = eigen_decomposition(matrix)
    assert np.allclose(values, np.linalg.eigvalsh(np.array(matrix)))


def test_input_not_modified():
    matrix = [[2.0, 1.0, 0.0], [1.0, 2.0, 1.0], [0.0, 1.0, 2.0]]
    copy = [row[:] for row in matrix]
    eigen_decomposition(matrix)
    assert matrix == copy


def test_non_square_rejected():
    with pytest.raises(ValueError):
        eigen_decomposition([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])