"""CUDA kernels for bilinear image resampling.

This module contains CUDA kernels rotating and resizing 2D images with
bilinear interpolation. Every thread computes one output pixel by inverse
mapping it into the source image.
"""

import math
from numba import cuda

from ..constants import _FASTMATH_DECORATOR


@cuda.jit(device=True, fastmath=True)
def _bilinear(d_image, x, y):
    """Bilinearly interpolate `d_image` at the continuous coordinate (x, y).

    The caller guarantees 0 <= x < cols - 1 and 0 <= y < rows - 1, so all four
    neighbours are in bounds. Weights are the fractional parts of x and y.
    """
    ix = int(math.floor(x))
    iy = int(math.floor(y))
    dx = x - ix
    dy = y - iy
    one_minus_dx = 1.0 - dx
    one_minus_dy = 1.0 - dy
    v00 = d_image[iy, ix]
    v10 = d_image[iy, ix + 1]
    v01 = d_image[iy + 1, ix]
    v11 = d_image[iy + 1, ix + 1]
    row0 = (v00 * one_minus_dx + v10 * dx) * one_minus_dy
    row1 = (v01 * one_minus_dx + v11 * dx) * dy
    return row0 + row1


# ============================================================================
# 2D Rotation Kernel
# ============================================================================

@_FASTMATH_DECORATOR
def _rotate_2d_kernel(
    d_image, d_output, n_rows, n_cols,
    cos_a, sin_a, ox, oy
):
    """Rotate a 2D image about (ox, oy).

    Parameters
    ----------
    d_image : numba.cuda.cudadrv.devicearray.DeviceNDArray
        Input 2D image array on CUDA, indexed (row, col).
    d_output : numba.cuda.cudadrv.devicearray.DeviceNDArray
        Output 2D image array on CUDA, same shape as `d_image`.
    n_rows : int
        Number of image rows.
    n_cols : int
        Number of image columns.
    cos_a : float
        Cosine of the rotation angle.
    sin_a : float
        Sine of the rotation angle.
    ox : float
        Column coordinate of the rotation origin.
    oy : float
        Row coordinate of the rotation origin.

    Notes
    -----
    Output pixels whose source coordinate lies outside the interpolation
    domain [0, n_cols - 1) x [0, n_rows - 1) are set to zero.
    """
    # One thread per output pixel: row-major grid
    row, col = cuda.grid(2)
    if row >= n_rows or col >= n_cols:
        return

    # Inverse map the output pixel into the source image
    dx = col - ox
    dy = row - oy
    x = ox + dx * cos_a - dy * sin_a
    y = oy + dx * sin_a + dy * cos_a

    if x >= 0.0 and y >= 0.0 and x < n_cols - 1 and y < n_rows - 1:
        d_output[row, col] = _bilinear(d_image, x, y)
    else:
        d_output[row, col] = 0.0


# ============================================================================
# 2D Resize Kernel
# ============================================================================

@_FASTMATH_DECORATOR
def _resize_2d_kernel(
    d_image, n_in_rows, n_in_cols,
    d_output, n_rows, n_cols,
    scale_y, scale_x
):
    """Resize a 2D image with half-pixel centred bilinear sampling.

    Parameters
    ----------
    d_image : numba.cuda.cudadrv.devicearray.DeviceNDArray
        Input 2D image array on CUDA.
    n_in_rows : int
        Number of input rows.
    n_in_cols : int
        Number of input columns.
    d_output : numba.cuda.cudadrv.devicearray.DeviceNDArray
        Zero-initialized output array on CUDA of shape (n_rows, n_cols).
    n_rows : int
        Number of output rows.
    n_cols : int
        Number of output columns.
    scale_y : float
        Ratio n_in_rows / n_rows.
    scale_x : float
        Ratio n_in_cols / n_cols.

    Notes
    -----
    Only interior output pixels are written; the border stays zero.
    """
    row, col = cuda.grid(2)
    if row < 1 or col < 1 or row >= n_rows - 1 or col >= n_cols - 1:
        return

    x = (col + 0.5) * scale_x - 0.5
    y = (row + 0.5) * scale_y - 0.5
    if x >= 0.0 and y >= 0.0 and x < n_in_cols - 1 and y < n_in_rows - 1:
        d_output[row, col] = _bilinear(d_image, x, y)
