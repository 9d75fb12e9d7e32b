"""Nearest orthonormal sinogram.

Hermite P-functionals expect a sinogram whose rows (or columns, for tall
sinograms) form an orthonormal set. The closest such matrix in Frobenius norm
is the polar factor U V^T of the singular value decomposition U S V^T, i.e.
the input with every singular value replaced by one.
"""

from logging import getLogger
from typing import NamedTuple

import torch

from .errors import InvalidInputError
from .functionals.median import weighted_median

log = getLogger(__name__)

CENTER_POLICIES = ("aligned", "energy", "geometric")


def _check_center_policy(center_policy):
    if center_policy not in CENTER_POLICIES:
        raise InvalidInputError(
            f"Unsupported center_policy: {center_policy!r}, expected one of {CENTER_POLICIES}")


class OrthonormalSinogram(NamedTuple):
    """A sinogram with orthonormal rows and the centre row of its Hermite basis."""

    data: torch.Tensor
    center: int


def _align_columns(sinogram):
    """Shift every column so its weighted median lands on one common row.

    Returns the zero-padded, aligned sinogram and the row all medians were
    moved to.
    """
    rows, cols = sinogram.shape
    center = (rows - 1) // 2
    offset = weighted_median(sinogram) - center
    lo, hi = int(offset.min()), int(offset.max())

    row = torch.arange(rows, device=sinogram.device).unsqueeze(1)
    target = row + (hi - offset).unsqueeze(0)
    aligned = sinogram.new_zeros((rows + hi - lo, cols))
    aligned.scatter_(0, target, sinogram)
    return aligned, center + hi


def nearest_orthonormal_sinogram(sinogram, center_policy="aligned"):
    """Compute the nearest orthonormal sinogram and its centre row.

    Parameters
    ----------
    sinogram : torch.Tensor
        Sinogram of shape (p_steps, a_steps).
    center_policy : {"aligned", "energy", "geometric"}, optional
        How the centre row is determined:

        - ``"aligned"``: every column is first shifted (with zero padding) so
          its weighted median lies on the geometric centre row; that row is
          the centre. The output then has more rows than the input when the
          medians differ.
        - ``"energy"``: the weighted median row of the row energies.
        - ``"geometric"``: ``(p_steps - 1) // 2``.

    Returns
    -------
    OrthonormalSinogram
        ``data`` is the matrix with orthonormal rows closest to the (aligned)
        sinogram when it has at most as many rows as columns, and with
        orthonormal columns otherwise; ``center`` is the centre row.

    Raises
    ------
    InvalidInputError
        If the sinogram is not a non-empty 2D tensor, or the centre policy
        is unknown.

    Notes
    -----
    All-zero rows are accepted: the singular vectors of a rank deficient
    input are completed to an orthonormal set, so the result still satisfies
    the orthonormality invariant although it is no longer unique.
    """
    if sinogram.dim() != 2 or sinogram.numel() == 0:
        raise InvalidInputError("Expected a non-empty 2D sinogram")
    _check_center_policy(center_policy)

    if center_policy == "aligned":
        sinogram, center = _align_columns(sinogram)
    elif center_policy == "energy":
        center = int(weighted_median(sinogram.pow(2).sum(dim=1)))
    else:
        center = (sinogram.shape[0] - 1) // 2

    # Decomposed in double precision
    u, _, vh = torch.linalg.svd(sinogram.to(torch.float64), full_matrices=False)
    nearest = (u @ vh).to(sinogram.dtype)
    log.debug("orthonormalized %dx%d sinogram, center row %d",
              nearest.shape[0], nearest.shape[1], center)
    return OrthonormalSinogram(nearest, int(center))
