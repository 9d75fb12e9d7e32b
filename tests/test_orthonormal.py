import pytest
import torch
import torch.testing

from tracetransform.errors import InvalidInputError
from tracetransform.orthonormal import nearest_orthonormal_sinogram


def _assert_semi_orthogonal(matrix):
    matrix = matrix.to(torch.float64)
    rows, cols = matrix.shape
    if rows <= cols:
        gram = matrix @ matrix.T
    else:
        gram = matrix.T @ matrix
    torch.testing.assert_close(gram, torch.eye(min(rows, cols), dtype=torch.float64),
                               atol=1e-5, rtol=0)


@pytest.mark.parametrize(
    "shape",
    [
        pytest.param((5, 8), id="wide"),
        pytest.param((8, 5), id="tall"),
        pytest.param((6, 6), id="square"),
    ],
)
@pytest.mark.parametrize("policy", ["aligned", "energy", "geometric"])
def test_orthonormal(shape, policy, generator):
    sinogram = torch.rand(shape, generator=generator)
    result = nearest_orthonormal_sinogram(sinogram, policy)
    _assert_semi_orthogonal(result.data)
    assert 0 <= result.center < result.data.shape[0]


def test_zero_rows_accepted(generator):
    sinogram = torch.rand((6, 10), generator=generator)
    sinogram[0] = 0.0
    sinogram[5] = 0.0
    result = nearest_orthonormal_sinogram(sinogram, "geometric")
    assert result.data.shape == (6, 10)
    _assert_semi_orthogonal(result.data)


def test_orthonormal_input_is_fixed_point():
    sinogram = torch.eye(5, dtype=torch.float64)[1:4]
    result = nearest_orthonormal_sinogram(sinogram, "geometric")
    torch.testing.assert_close(result.data, sinogram)


def test_scale_invariant(generator):
    sinogram = torch.rand((4, 7), generator=generator, dtype=torch.float64)
    torch.testing.assert_close(
        nearest_orthonormal_sinogram(3.5 * sinogram, "geometric").data,
        nearest_orthonormal_sinogram(sinogram, "geometric").data,
    )


def test_keeps_dtype():
    result = nearest_orthonormal_sinogram(torch.rand((3, 5)), "geometric")
    assert result.data.dtype == torch.float32


class TestCenterPolicies:
    def test_aligned(self):
        # column peaks at rows 1, 3, 5 and 3 around the geometric centre 3
        sinogram = torch.zeros((7, 4))
        for col, row in enumerate([1, 3, 5, 3]):
            sinogram[row, col] = 1.0
        result = nearest_orthonormal_sinogram(sinogram)
        assert result.center == 5
        assert result.data.shape == (11, 4)

    def test_aligned_without_shift(self):
        sinogram = torch.zeros((5, 3))
        sinogram[2] = 1.0
        result = nearest_orthonormal_sinogram(sinogram, "aligned")
        assert result.center == 2
        assert result.data.shape == (5, 3)

    def test_energy(self):
        sinogram = torch.full((7, 3), 0.01)
        sinogram[5] = 10.0
        assert nearest_orthonormal_sinogram(sinogram, "energy").center == 5

    @pytest.mark.parametrize("rows,center", [(7, 3), (8, 3)])
    def test_geometric(self, rows, center):
        result = nearest_orthonormal_sinogram(torch.rand((rows, 4)), "geometric")
        assert result.center == center
        assert result.data.shape == (rows, 4)

    def test_unknown_policy(self):
        with pytest.raises(InvalidInputError, match="center_policy") as info:
            nearest_orthonormal_sinogram(torch.rand((3, 3)), "median")
        assert isinstance(info.value, ValueError)


@pytest.mark.parametrize(
    "sinogram",
    [
        pytest.param(torch.zeros((0, 4)), id="empty"),
        pytest.param(torch.zeros(4), id="1D"),
    ],
)
def test_invalid_input(sinogram):
    with pytest.raises(InvalidInputError):
        nearest_orthonormal_sinogram(sinogram)
