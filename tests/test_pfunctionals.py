import logging
import math

import pytest
import torch
import torch.testing

from tracetransform.errors import (
    InvalidFunctionalSelectionError,
    InvalidInputError,
    PrecomputeMisuseError,
)
from tracetransform.functionals.pfunctionals import (
    hermite_domain,
    hermite_function,
    hermite_polynomial,
    pfunctional_1,
    pfunctional_2,
    pfunctional_3,
    pfunctional_3_prepare,
    pfunctional_hermite,
    pfunctional_hermite_prepare,
)


def _column(*values):
    return torch.tensor(values, dtype=torch.float64)


class TestP1:
    @pytest.mark.parametrize(
        "column,expected",
        [
            pytest.param((0, 1, 2, 3), 3.0, id="ramp"),
            pytest.param((3, 0, 3), 6.0, id="valley"),
            pytest.param((2,), 0.0, id="single sample"),
        ],
    )
    def test_values(self, column, expected):
        assert pfunctional_1(_column(*column)).item() == pytest.approx(expected)

    def test_batch(self):
        batch = torch.tensor([[0.0, 3.0], [1.0, 0.0], [2.0, 3.0]])
        torch.testing.assert_close(pfunctional_1(batch), torch.tensor([2.0, 6.0]))


class TestP2:
    @pytest.mark.parametrize(
        "column,expected",
        [
            pytest.param((3, 1, 2), 2.0, id="odd"),
            pytest.param((4, 1, 3, 2), 2.0, id="even takes lower median"),
            pytest.param((-1, -5, 7), -1.0, id="negative"),
        ],
    )
    def test_values(self, column, expected):
        assert pfunctional_2(_column(*column)).item() == pytest.approx(expected)

    def test_batch(self):
        batch = torch.tensor([[3.0, 10.0], [1.0, 30.0], [2.0, 20.0]])
        torch.testing.assert_close(pfunctional_2(batch), torch.tensor([2.0, 20.0]))


class TestP3:
    @pytest.mark.parametrize(
        "column,expected",
        [
            # the DFT of an impulse is flat
            pytest.param((1, 0, 0, 0), 4.0, id="impulse"),
            pytest.param((1, 1), 16.0, id="constant"),
            pytest.param((0, 0, 0), 0.0, id="zero"),
        ],
    )
    def test_values(self, column, expected):
        assert pfunctional_3(_column(*column)).item() == pytest.approx(expected)

    def test_precompute_dtype(self):
        with pfunctional_3_prepare(4, 2, dtype=torch.float64) as precalc:
            assert precalc.fourier.dtype == torch.complex128
            torch.testing.assert_close(
                pfunctional_3(torch.ones((4, 2), dtype=torch.float64), precalc),
                torch.tensor([256.0, 256.0], dtype=torch.float64),
            )

    def test_overflow_is_reported(self, caplog):
        column = torch.full((4,), 1e20, dtype=torch.float32)
        with caplog.at_level(logging.WARNING, logger="tracetransform.functionals.pfunctionals"):
            result = pfunctional_3(column)
        assert not math.isfinite(result.item())
        assert "non-finite" in caplog.text


class TestHermite:
    @pytest.mark.parametrize(
        "order,polynomial",
        [
            pytest.param(0, lambda x: 1.0, id="H0"),
            pytest.param(1, lambda x: 2 * x, id="H1"),
            pytest.param(2, lambda x: 4 * x ** 2 - 2, id="H2"),
            pytest.param(3, lambda x: 8 * x ** 3 - 12 * x, id="H3"),
            pytest.param(4, lambda x: 16 * x ** 4 - 48 * x ** 2 + 12, id="H4"),
        ],
    )
    def test_polynomial(self, order, polynomial):
        x = torch.tensor([-1.5, 0.0, 0.5, 2.0], dtype=torch.float64)
        expected = torch.tensor([polynomial(v) for v in x.tolist()], dtype=torch.float64)
        torch.testing.assert_close(hermite_polynomial(order, x), expected)

    def test_functions_are_orthonormal(self):
        x = torch.linspace(-12, 12, 6001, dtype=torch.float64)
        functions = torch.stack([hermite_function(n, x) for n in range(5)])
        gram = torch.trapezoid(functions.unsqueeze(0) * functions.unsqueeze(1), x, dim=-1)
        torch.testing.assert_close(gram, torch.eye(5, dtype=torch.float64), atol=1e-6, rtol=0)

    @pytest.mark.parametrize(
        "length,center,expected",
        [
            pytest.param(5, 2, [-10.0, -5.0, 0.0, 5.0, 10.0], id="symmetric"),
            pytest.param(5, 1, [-10.0, 0.0, 10 / 3, 20 / 3, 10.0], id="asymmetric"),
        ],
    )
    def test_domain(self, length, center, expected):
        torch.testing.assert_close(hermite_domain(length, center),
                                   torch.tensor(expected, dtype=torch.float64))

    def test_projection(self):
        column = torch.tensor([0.1, 0.5, 0.9, 0.5, 0.1], dtype=torch.float64)
        basis = hermite_function(2, hermite_domain(5, 2))
        expected = (column * basis).sum()
        torch.testing.assert_close(pfunctional_hermite(column, 2, 2), expected)

    def test_batch_with_context(self, generator):
        batch = torch.rand((7, 3), generator=generator)
        with pfunctional_hermite_prepare(7, 3, 1, 3) as precalc:
            result = pfunctional_hermite(batch, 1, 3, precalc)
        expected = torch.stack([pfunctional_hermite(batch[:, j], 1, 3) for j in range(3)])
        torch.testing.assert_close(result, expected)

    def test_missing_center(self):
        with pytest.raises(InvalidFunctionalSelectionError, match="center"):
            pfunctional_hermite(torch.ones(5), 1, None)

    @pytest.mark.parametrize("order", [-1, 1.5, None])
    def test_invalid_order(self, order):
        with pytest.raises(InvalidFunctionalSelectionError):
            pfunctional_hermite(torch.ones(5), order, 2)

    @pytest.mark.parametrize("center", [-1, 5])
    def test_center_out_of_range(self, center):
        with pytest.raises(InvalidInputError):
            pfunctional_hermite(torch.ones(5), 1, center)

    def test_context_parameter_mismatch(self):
        with pfunctional_hermite_prepare(5, 1, 1, 2) as precalc:
            with pytest.raises(PrecomputeMisuseError):
                pfunctional_hermite(torch.ones(5), 2, 2, precalc)
            with pytest.raises(PrecomputeMisuseError):
                pfunctional_hermite(torch.ones(5), 1, 3, precalc)
