"""Circus functions.

A circus function reduces every angle column of a sinogram with a
P-functional, giving one value per angle.
"""

from logging import getLogger

import torch

from .errors import InvalidFunctionalSelectionError, InvalidInputError
from .functionals.selection import parse_pfunctionals
from .orthonormal import nearest_orthonormal_sinogram

log = getLogger(__name__)


def zscore(values):
    """Standardize a sequence: subtract the mean, divide by the standard deviation.

    The population standard deviation is used. A constant sequence has no
    spread and maps to zeros.
    """
    mean = values.mean()
    std = values.std(correction=0)
    if std == 0:
        return torch.zeros_like(values)
    return (values - mean) / std


def _check_sinogram(sinogram):
    if not isinstance(sinogram, torch.Tensor) or sinogram.dim() != 2 or sinogram.numel() == 0:
        raise InvalidInputError("Expected a non-empty 2D sinogram tensor")


def _reduce_columns(sinogram, pfunctional):
    rows, cols = sinogram.shape
    precalc = pfunctional.prepare(rows, cols, device=sinogram.device, dtype=sinogram.dtype)
    if precalc is None:
        return pfunctional(sinogram)
    with precalc:
        return pfunctional(sinogram, precalc)


def get_circus_functions(sinogram, pfunctionals, normalize=True):
    """Compute the circus functions of a sinogram for several P-functionals.

    Parameters
    ----------
    sinogram : torch.Tensor
        Sinogram of shape (p_steps, a_steps).
    pfunctionals : str or sequence
        Regular P-functional identifiers (P1-P3) or wrappers.
    normalize : bool, optional
        Z-score every circus function (default: True). Pass False to obtain
        the raw P-functional values.

    Returns
    -------
    list of torch.Tensor
        One circus function of shape (a_steps,) per P-functional.

    Raises
    ------
    InvalidFunctionalSelectionError
        If an identifier is invalid or names a Hermite functional; those
        require `get_orthonormal_circus_functions`.
    """
    pfunctionals = parse_pfunctionals(pfunctionals)
    _check_sinogram(sinogram)
    if any(p.orthonormal for p in pfunctionals):
        raise InvalidFunctionalSelectionError(
            "Hermite P-functionals require get_orthonormal_circus_functions()")

    circus = []
    for pfunctional in pfunctionals:
        log.debug("computing circus function %s", pfunctional.name)
        values = _reduce_columns(sinogram, pfunctional)
        circus.append(zscore(values) if normalize else values)
    return circus


def get_circus_function(sinogram, pfunctional, normalize=True):
    """Compute the circus function of a sinogram for one P-functional.

    Parameters
    ----------
    sinogram : torch.Tensor
        Sinogram of shape (p_steps, a_steps).
    pfunctional : str, PFunctional or PFunctionalWrapper
        Regular P-functional.
    normalize : bool, optional
        Z-score the result (default: True).

    Returns
    -------
    torch.Tensor
        Circus function of shape (a_steps,).

    Examples
    --------
    >>> get_circus_function(torch.tensor([[0.], [1.], [2.], [3.]]), "P1",
    ...                     normalize=False)
    tensor([3.])
    """
    return get_circus_functions(sinogram, [pfunctional], normalize)[0]


def get_orthonormal_circus_functions(sinogram, pfunctionals, center_policy="aligned",
                                     normalize=False):
    """Compute Hermite circus functions on the nearest orthonormal sinogram.

    Parameters
    ----------
    sinogram : torch.Tensor
        Sinogram of shape (p_steps, a_steps).
    pfunctionals : str or sequence
        Hermite P-functional identifiers (``"H<order>"``) or wrappers.
    center_policy : str, optional
        Centre row selection passed to `nearest_orthonormal_sinogram`.
    normalize : bool, optional
        Z-score every circus function (default: False).

    Returns
    -------
    list of torch.Tensor
        One circus function of shape (a_steps,) per P-functional.

    Raises
    ------
    InvalidFunctionalSelectionError
        If a selected functional is not a Hermite functional.
    """
    pfunctionals = parse_pfunctionals(pfunctionals)
    _check_sinogram(sinogram)
    if not all(p.orthonormal for p in pfunctionals):
        raise InvalidFunctionalSelectionError(
            "Only Hermite P-functionals operate on the orthonormal sinogram")

    orthonormal = nearest_orthonormal_sinogram(sinogram, center_policy)
    circus = []
    for pfunctional in pfunctionals:
        bound = pfunctional.with_center(orthonormal.center)
        log.debug("computing circus function %s (center %d)", bound.name, bound.center)
        values = _reduce_columns(orthonormal.data, bound)
        circus.append(zscore(values) if normalize else values)
    return circus
