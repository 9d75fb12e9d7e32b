"""Image conversion and bilinear resampling.

This module provides the resampling primitives of the trace transform:
rotation about a point, resizing and zero padding. CUDA tensors are processed
by the kernels in :mod:`tracetransform.kernels`, every other tensor by the
equivalent vectorized PyTorch code.
"""

import math
from logging import getLogger

import numpy as np
import torch

from .constants import _DTYPE
from .errors import InvalidInputError
from .geometry import Point
from .kernels import _rotate_2d_kernel, _resize_2d_kernel
from .utils import (
    TorchCUDABridge,
    _as_tensor,
    _get_numba_external_stream_for,
    _grid_2d,
)

log = getLogger(__name__)


# ============================================================================
# Conversion
# ============================================================================

def as_image(data, dtype=None, device=None):
    """Convert grayscale samples to a 2D floating point image tensor.

    Parameters
    ----------
    data : array-like or torch.Tensor
        Grayscale samples of shape (rows, cols). 8-bit unsigned input is
        scaled from [0, 255] to [0, 1]; other input keeps its value range.
    dtype : torch.dtype or numpy.dtype, optional
        Desired floating point type.
    device : torch.device, optional
        Target device.

    Returns
    -------
    torch.Tensor
        Image tensor of shape (rows, cols).

    Raises
    ------
    InvalidInputError
        If the input is not two-dimensional or has no samples.
    """
    if isinstance(data, np.ndarray) and data.dtype == np.uint8:
        data = data.astype(_DTYPE) / 255.0
    elif isinstance(data, torch.Tensor) and data.dtype == torch.uint8:
        data = data.float() / 255.0
    image = _as_tensor(data, dtype=dtype, device=device)
    if image.dim() != 2:
        raise InvalidInputError(f"Expected a 2D image, got {image.dim()}D")
    if image.numel() == 0:
        raise InvalidInputError("Image has no samples")
    return image


def require_square(image):
    """Raise InvalidInputError unless `image` is a non-empty square grid."""
    if image.dim() != 2 or image.numel() == 0:
        raise InvalidInputError("Expected a non-empty 2D image")
    rows, cols = image.shape
    if rows != cols:
        raise InvalidInputError(
            f"Expected a square (padded) image, got shape ({rows}, {cols}). "
            "Call pad() before computing a sinogram."
        )


# ============================================================================
# Interpolation
# ============================================================================

def interpolate(image, x, y):
    """Bilinearly interpolate an image at continuous coordinates.

    Parameters
    ----------
    image : torch.Tensor
        Source image of shape (rows, cols).
    x : torch.Tensor
        Column coordinates.
    y : torch.Tensor
        Row coordinates, broadcastable against `x`.

    Returns
    -------
    torch.Tensor
        Interpolated samples with the broadcast shape of `x` and `y`.

    Notes
    -----
    The interpolation domain is [0, cols - 1) x [0, rows - 1); coordinates
    outside of it yield zero. The weights are the fractional parts of the
    coordinates, no clamping is applied inside the domain.
    """
    rows, cols = image.shape
    x, y = torch.broadcast_tensors(x, y)
    valid = (x >= 0) & (y >= 0) & (x < cols - 1) & (y < rows - 1)

    x0 = torch.floor(x)
    y0 = torch.floor(y)
    dx = x - x0
    dy = y - y0
    # Out-of-domain samples are masked below, keep their indices addressable
    ix = x0.long().clamp(0, max(cols - 2, 0))
    iy = y0.long().clamp(0, max(rows - 2, 0))
    ix1 = (ix + 1).clamp(max=cols - 1)
    iy1 = (iy + 1).clamp(max=rows - 1)

    one_minus_dx = 1.0 - dx
    one_minus_dy = 1.0 - dy
    row0 = image[iy, ix] * one_minus_dx + image[iy, ix1] * dx
    row1 = image[iy1, ix] * one_minus_dx + image[iy1, ix1] * dx
    values = row0 * one_minus_dy + row1 * dy
    return torch.where(valid, values, torch.zeros_like(values))


# ============================================================================
# Rotation
# ============================================================================

def rotate(image, origin, angle):
    """Rotate an image about `origin` using bilinear interpolation.

    Parameters
    ----------
    image : torch.Tensor
        Image of shape (rows, cols).
    origin : Point
        Rotation origin (x = column, y = row).
    angle : float
        Rotation angle in radians.

    Returns
    -------
    torch.Tensor
        Rotated image with the same shape, dtype and device as `image`.

    Notes
    -----
    Every output pixel p takes the value of the source at
    origin + R(angle) (p - origin). Source coordinates outside the
    interpolation domain give zero, so callers pad the image (see `pad`)
    to keep every rotation of its content in bounds.
    """
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    if image.is_cuda:
        return _rotate_cuda(image, origin, cos_a, sin_a)

    rows, cols = image.shape
    row = torch.arange(rows, dtype=image.dtype, device=image.device).unsqueeze(1)
    col = torch.arange(cols, dtype=image.dtype, device=image.device).unsqueeze(0)
    dx = col - origin.x
    dy = row - origin.y
    x = origin.x + dx * cos_a - dy * sin_a
    y = origin.y + dx * sin_a + dy * cos_a
    return interpolate(image, x, y)


def _rotate_cuda(image, origin, cos_a, sin_a):
    image = image.contiguous()
    rows, cols = image.shape
    output = torch.empty_like(image)

    d_image = TorchCUDABridge.tensor_to_cuda_array(image)
    d_output = TorchCUDABridge.tensor_to_cuda_array(output)

    grid, tpb = _grid_2d(rows, cols)
    numba_stream = _get_numba_external_stream_for(torch.cuda.current_stream())
    _rotate_2d_kernel[grid, tpb, numba_stream](
        d_image, d_output, rows, cols,
        _DTYPE(cos_a), _DTYPE(sin_a), _DTYPE(origin.x), _DTYPE(origin.y)
    )
    return output


# ============================================================================
# Resizing and Padding
# ============================================================================

def resize(image, rows, cols):
    """Resample an image to (rows, cols) with per-axis linear interpolation.

    Parameters
    ----------
    image : torch.Tensor
        Image of shape (in_rows, in_cols).
    rows : int
        Number of output rows.
    cols : int
        Number of output columns.

    Returns
    -------
    torch.Tensor
        Resized image of shape (rows, cols).

    Notes
    -----
    Pixel centres are mapped with half-pixel offsets. Only interior pixels
    are computed; the outer border is left zero. This approximation is only
    used ahead of padding, where the border carries no content.
    """
    rows, cols = int(rows), int(cols)
    if rows <= 0 or cols <= 0:
        raise InvalidInputError(f"Invalid target size ({rows}, {cols})")
    in_rows, in_cols = image.shape
    scale_y = in_rows / rows
    scale_x = in_cols / cols
    output = image.new_zeros((rows, cols))

    if image.is_cuda:
        image = image.contiguous()
        d_image = TorchCUDABridge.tensor_to_cuda_array(image)
        d_output = TorchCUDABridge.tensor_to_cuda_array(output)
        grid, tpb = _grid_2d(rows, cols)
        numba_stream = _get_numba_external_stream_for(torch.cuda.current_stream())
        _resize_2d_kernel[grid, tpb, numba_stream](
            d_image, in_rows, in_cols, d_output, rows, cols,
            _DTYPE(scale_y), _DTYPE(scale_x)
        )
        return output

    if rows < 3 or cols < 3:
        return output
    row = torch.arange(1, rows - 1, dtype=image.dtype, device=image.device)
    col = torch.arange(1, cols - 1, dtype=image.dtype, device=image.device)
    y = ((row + 0.5) * scale_y - 0.5).unsqueeze(1)
    x = ((col + 0.5) * scale_x - 0.5).unsqueeze(0)
    output[1:-1, 1:-1] = interpolate(image, x, y)
    return output


def padded_size(rows, cols):
    """Side length of the square canvas `pad` produces for a (rows, cols) image."""
    radius = math.ceil(math.hypot(rows, cols) / 2) + 1
    return 2 * radius + 1


def pad(image):
    """Centre an image on a zero canvas large enough for any rotation.

    Parameters
    ----------
    image : torch.Tensor
        Image of shape (rows, cols).

    Returns
    -------
    torch.Tensor
        Square image of side 2 r + 1 with r = ceil(hypot(rows, cols) / 2) + 1.

    Notes
    -----
    The image pixel (floor((rows + 1) / 2) - 1, floor((cols + 1) / 2) - 1)
    lands on the canvas centre (r, r). Every image sample then lies within
    distance r - 1 of the centre, so rotating the canvas about its centre by
    any angle never samples outside the interpolation domain.
    """
    if image.dim() != 2 or image.numel() == 0:
        raise InvalidInputError("Expected a non-empty 2D image")
    rows, cols = image.shape
    side = padded_size(rows, cols)
    radius = side // 2
    origin = Point(math.floor((cols + 1) / 2) - 1, math.floor((rows + 1) / 2) - 1)
    top = radius - origin.y
    left = radius - origin.x

    padded = image.new_zeros((side, side))
    padded[top:top + rows, left:left + cols] = image
    log.debug("padded %dx%d image to %dx%d", rows, cols, side, side)
    return padded
