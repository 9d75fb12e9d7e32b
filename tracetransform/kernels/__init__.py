"""CUDA kernels for image resampling.

This subpackage contains the CUDA kernels backing the GPU path of image
rotation and resizing.
"""

from .interpolation import (
    _rotate_2d_kernel,
    _resize_2d_kernel,
)

__all__ = [
    '_rotate_2d_kernel',
    '_resize_2d_kernel',
]
