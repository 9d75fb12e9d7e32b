"""P-functionals: reductions of one sinogram column to a scalar.

Like the T-functionals, every P-functional accepts a single column of shape
(n,) or a batch of columns of shape (n, m) and reduces along the first
dimension. The Hermite functional projects a column of an orthonormal
sinogram onto a Hermite function centred at a row supplied by the
orthonormalizer.
"""

import math
from logging import getLogger

import torch

from ..constants import _HERMITE_DOMAIN
from ..errors import InvalidFunctionalSelectionError, InvalidInputError, PrecomputeMisuseError
from .median import weighted_median
from .precalc import (
    PFunctional2Precalc,
    PFunctional3Precalc,
    PFunctionalHermitePrecalc,
    with_precalc,
)

log = getLogger(__name__)


# ============================================================================
# P1
# ============================================================================

@with_precalc()
def pfunctional_1(data):
    """P1: sum of absolute first differences, sum_p |g(p+1) - g(p)|."""
    return torch.abs(data[1:] - data[:-1]).sum(dim=0)


# ============================================================================
# P2
# ============================================================================

def pfunctional_2_prepare(rows, cols, device=None, dtype=None):
    return PFunctional2Precalc(rows, cols, device=device, dtype=dtype)


@with_precalc(pfunctional_2_prepare)
def pfunctional_2(data, precalc):
    """P2: the median of the column.

    The column is sorted and sampled at the weighted median position of
    unit weights, i.e. the lower median for even lengths.
    """
    torch.sort(data, dim=0, stable=True, out=(precalc.sorted, precalc.indices))
    median = weighted_median(torch.ones_like(data), prescan=precalc.prescan,
                             out=precalc.medians)
    return precalc.sorted.gather(0, median.unsqueeze(0)).squeeze(0)


# ============================================================================
# P3
# ============================================================================

def pfunctional_3_prepare(rows, cols, device=None, dtype=None):
    return PFunctional3Precalc(rows, cols, device=device, dtype=dtype)


@with_precalc(pfunctional_3_prepare)
def pfunctional_3(data, precalc):
    """P3: sum of the fourth powers of the DFT magnitudes, sum_k |G(k)|^4.

    Notes
    -----
    The fourth power overflows single precision quickly for unnormalized
    data. Normalizing the input is the caller's responsibility; the data is
    never rescaled here, a non-finite result is reported as a warning.
    """
    torch.fft.fft(data, dim=0, out=precalc.fourier)
    result = precalc.fourier.abs().pow(4).sum(dim=0)
    if not bool(torch.isfinite(result).all()):
        log.warning("P3 overflowed to a non-finite value; "
                    "normalize the sinogram before applying P3")
    return result


# ============================================================================
# Hermite
# ============================================================================

def hermite_polynomial(order, x):
    """Physicists' Hermite polynomial H_order evaluated at `x`.

    Uses the recurrence H_n(x) = 2 x H_{n-1}(x) - 2 (n - 1) H_{n-2}(x).
    """
    previous = torch.ones_like(x)
    if order == 0:
        return previous
    current = 2 * x
    for n in range(2, order + 1):
        previous, current = current, 2 * x * current - 2 * (n - 1) * previous
    return current


def hermite_function(order, x):
    """Normalized Hermite function of the given order evaluated at `x`.

    psi_n(x) = H_n(x) exp(-x^2 / 2) / sqrt(2^n n! sqrt(pi))
    """
    norm = math.sqrt(2 ** order * math.factorial(order) * math.sqrt(math.pi))
    return hermite_polynomial(order, x) / (norm * torch.exp(x * x / 2))


def hermite_domain(length, center):
    """Discretize [-d, d] over a column of `length` samples split at `center`.

    Position 0 maps to -d, `center` to 0 and the last position to +d. Both
    halves are sampled uniformly, with their own step size.
    """
    p = torch.arange(length, dtype=torch.float64)
    lower = _HERMITE_DOMAIN / max(center, 1)
    upper = _HERMITE_DOMAIN / max(length - 1 - center, 1)
    return torch.where(p < center, (p - center) * lower, (p - center) * upper)


def _check_hermite_arguments(length, order, center):
    if order is None or int(order) != order or order < 0:
        raise InvalidFunctionalSelectionError(
            f"Hermite P-functional requires a non-negative integer order, got {order!r}")
    if center is None:
        raise InvalidFunctionalSelectionError(
            "Hermite P-functional requires a center; obtain one from "
            "nearest_orthonormal_sinogram()")
    if not 0 <= center < length:
        raise InvalidInputError(
            f"Hermite center {center} outside of a column of length {length}")


def pfunctional_hermite_prepare(rows, cols, order, center, device=None, dtype=None):
    """Sample the Hermite function of `order` for columns of length `rows`."""
    _check_hermite_arguments(rows, order, center)
    basis = hermite_function(int(order), hermite_domain(rows, int(center)))
    return PFunctionalHermitePrecalc(rows, cols, int(order), int(center), basis,
                                     device=device, dtype=dtype)


def pfunctional_hermite(data, order, center, precalc=None):
    """Hermite: projection of a column onto the Hermite function of `order`.

    Parameters
    ----------
    data : torch.Tensor
        Column(s) of an orthonormal sinogram, shape (n,) or (n, m).
    order : int
        Order of the Hermite function.
    center : int
        Row of the column mapped onto the origin of the Hermite function.
    precalc : PFunctionalHermitePrecalc, optional
        Context prepared for the same dimensions, order and center.

    Returns
    -------
    torch.Tensor
        sum_p g(p) psi_order(z(p)), 0-d for one column, (m,) for a batch.
    """
    single = data.dim() == 1
    if single:
        data = data.unsqueeze(1)
    if precalc is None:
        with pfunctional_hermite_prepare(*data.shape, order, center,
                                         device=data.device, dtype=data.dtype) as precalc:
            result = (precalc.basis.unsqueeze(1) * data).sum(dim=0)
    else:
        precalc.check(data)
        if (precalc.order, precalc.center) != (order, center):
            raise PrecomputeMisuseError(
                f"Hermite context prepared for order {precalc.order} and center "
                f"{precalc.center}, used with order {order} and center {center}")
        result = (precalc.basis.unsqueeze(1) * data).sum(dim=0)
    return result[0] if single else result
