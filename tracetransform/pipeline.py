"""End-to-end trace transform pipeline.

Validates a functional selection, prepares the image and computes every
requested sinogram and circus function.
"""

import dataclasses
import math
from logging import getLogger
from typing import List, Tuple

import torch

from .circus import get_circus_functions, get_orthonormal_circus_functions
from .constants import _ANGLE_STEP, _FULL_ANGLE
from .functionals.selection import parse_pfunctionals, parse_tfunctionals
from .image import as_image, pad, resize
from .orthonormal import _check_center_policy
from .sinogram import _check_angle_step, get_sinograms

log = getLogger(__name__)


@dataclasses.dataclass
class TraceTransformResult:
    """Sinograms and circus functions of one image.

    Entries follow the selection order. A functional selected twice appears
    twice, so the circus table always has one row per (T, P) pair.

    Attributes
    ----------
    sinograms : list of (str, torch.Tensor)
        T-functional name and sinogram of shape (p_steps, a_steps).
    circus : list of (str, str, torch.Tensor)
        T-functional name, P-functional name and circus function of shape
        (a_steps,).
    """

    sinograms: List[Tuple[str, torch.Tensor]] = dataclasses.field(default_factory=list)
    circus: List[Tuple[str, str, torch.Tensor]] = dataclasses.field(default_factory=list)

    def sinogram(self, tfunctional):
        """First sinogram computed with the named T-functional."""
        for name, sinogram in self.sinograms:
            if name == tfunctional:
                return sinogram
        raise KeyError(tfunctional)

    def circus_function(self, tfunctional, pfunctional):
        """First circus function of the named (T, P) pair."""
        for tname, pname, values in self.circus:
            if (tname, pname) == (tfunctional, pfunctional):
                return values
        raise KeyError((tfunctional, pfunctional))

    def circus_headers(self) -> List[str]:
        """Column labels ``"<T>-<P>"`` of the circus table."""
        return [f"{t}-{p}" for t, p, _ in self.circus]

    def circus_table(self) -> torch.Tensor:
        """Circus functions stacked to shape (len(circus), a_steps)."""
        if not self.circus:
            return torch.empty((0, 0))
        return torch.stack([values for _, _, values in self.circus])


def orthonormal_image_size(angle_step=_ANGLE_STEP):
    """Side the image is resized to before an orthonormal pipeline.

    The diagonal of the resized image covers as many offsets as there are
    angles, so the padded sinogram is close to square.
    """
    angles = math.ceil(_FULL_ANGLE / angle_step)
    return math.ceil(angles / math.sqrt(2))


def trace_transform(image, tfunctionals, pfunctionals=(), angle_step=_ANGLE_STEP,
                    normalize=True, center_policy="aligned"):
    """Compute sinograms and circus functions of an image.

    Parameters
    ----------
    image : array-like or torch.Tensor
        Grayscale image of shape (rows, cols); 8-bit input is scaled to [0, 1].
    tfunctionals : str or sequence
        Ordered T-functional selection, e.g. ``"Radon,T1"`` or ``["0", "3"]``.
    pfunctionals : str or sequence, optional
        Ordered P-functional selection, either regular (``"P1,P3"``) or
        Hermite (``"H1,H2"``), never both.
    angle_step : float, optional
        Angular resolution in degrees (default: 1).
    normalize : bool, optional
        Z-score regular circus functions (default: True).
    center_policy : str, optional
        Centre row selection of the orthonormal sinogram, one of
        ``"aligned"``, ``"energy"`` or ``"geometric"``.

    Returns
    -------
    TraceTransformResult

    Raises
    ------
    InvalidFunctionalSelectionError
        If the selection is invalid. Raised before any computation.
    InvalidInputError
        If the image is empty or not two-dimensional, the angle step is not
        positive or the centre policy is unknown. Arguments are checked
        before the image is converted.
    """
    tfunctionals = parse_tfunctionals(tfunctionals)
    pfunctionals = parse_pfunctionals(pfunctionals)
    _check_angle_step(angle_step)
    _check_center_policy(center_policy)
    orthonormal = any(p.orthonormal for p in pfunctionals)

    image = as_image(image)
    if orthonormal:
        side = orthonormal_image_size(angle_step)
        log.info("resizing %dx%d image to %dx%d for orthonormal P-functionals",
                 image.shape[0], image.shape[1], side, side)
        image = resize(image, side, side)
    padded = pad(image)

    log.info("calculating %s", ", ".join(t.name for t in tfunctionals))
    sinograms = get_sinograms(padded, tfunctionals, angle_step)

    result = TraceTransformResult()
    for tfunctional, sinogram in zip(tfunctionals, sinograms):
        result.sinograms.append((tfunctional.name, sinogram))
        if not pfunctionals:
            continue
        if orthonormal:
            circus = get_orthonormal_circus_functions(sinogram, pfunctionals, center_policy)
        else:
            circus = get_circus_functions(sinogram, pfunctionals, normalize)
        for pfunctional, values in zip(pfunctionals, circus):
            result.circus.append((tfunctional.name, pfunctional.name, values))
    return result
