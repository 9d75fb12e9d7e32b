"""Sinogram generation.

For every angle the padded image is rotated about its centre and every
column of the rotated image is reduced with the selected T-functionals. All
offsets of one angle are evaluated as one batched reduction.
"""

import contextlib
from logging import getLogger

from .constants import _ANGLE_STEP
from .errors import InvalidInputError
from .functionals.selection import parse_tfunctionals
from .geometry import angle_range, deg2rad, image_origin
from .image import as_image, require_square, rotate
from .trace import extract_traces

log = getLogger(__name__)


def _check_angle_step(angle_step):
    if not angle_step > 0:
        raise InvalidInputError(f"Angle step must be positive, got {angle_step}")


def get_sinograms(image, tfunctionals, angle_step=_ANGLE_STEP):
    """Compute the sinograms of a padded image for several T-functionals.

    The rotation of each angle is shared by all T-functionals.

    Parameters
    ----------
    image : array-like or torch.Tensor
        Square (padded) image of shape (n, n), see `tracetransform.pad`.
    tfunctionals : str or sequence
        T-functional identifiers or `TFunctionalWrapper` instances.
    angle_step : float, optional
        Angular resolution in degrees (default: 1).

    Returns
    -------
    list of torch.Tensor
        One sinogram of shape (n, a_steps) per T-functional, in selection
        order, with a_steps = ceil(360 / angle_step). Entry (p, a) is the
        T-functional of the trace at offset p after rotating the image by
        -a * angle_step degrees.

    Raises
    ------
    InvalidFunctionalSelectionError
        If a T-functional identifier is invalid.
    InvalidInputError
        If the image is not square or the angle step is not positive.

    Notes
    -----
    Precompute contexts are prepared once before the angle loop and released
    when the loop exits, including on errors.
    """
    tfunctionals = parse_tfunctionals(tfunctionals)
    _check_angle_step(angle_step)
    image = as_image(image)
    require_square(image)

    rows, cols = image.shape
    origin = image_origin(rows, cols)
    angles = angle_range(angle_step)
    sinograms = [image.new_zeros((cols, len(angles))) for _ in tfunctionals]

    with contextlib.ExitStack() as stack:
        precalcs = []
        for tfunctional in tfunctionals:
            precalc = tfunctional.prepare(rows, cols, device=image.device, dtype=image.dtype)
            if precalc is not None:
                stack.enter_context(precalc)
            precalcs.append(precalc)

        log.debug("computing %s over %d angles of a %dx%d image",
                  ", ".join(t.name for t in tfunctionals), len(angles), rows, cols)
        for a, angle in enumerate(angles):
            rotated = rotate(image, origin, -deg2rad(angle))
            traces = extract_traces(rotated)
            for sinogram, tfunctional, precalc in zip(sinograms, tfunctionals, precalcs):
                sinogram[:, a] = tfunctional(traces, precalc)

    return sinograms


def get_sinogram(image, tfunctional, angle_step=_ANGLE_STEP):
    """Compute the sinogram of a padded image for one T-functional.

    Parameters
    ----------
    image : array-like or torch.Tensor
        Square (padded) image of shape (n, n).
    tfunctional : str, TFunctional or TFunctionalWrapper
        The T-functional to apply to every trace.
    angle_step : float, optional
        Angular resolution in degrees (default: 1).

    Returns
    -------
    torch.Tensor
        Sinogram of shape (n, ceil(360 / angle_step)).

    Examples
    --------
    >>> padded = pad(as_image(np.zeros((256, 256))))
    >>> sinogram = get_sinogram(padded, "Radon")
    >>> sinogram.shape
    torch.Size([367, 360])
    """
    return get_sinograms(image, [tfunctional], angle_step)[0]
