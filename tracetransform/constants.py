"""Global constants and configuration for the tracetransform package.

This module defines core constants used throughout the package, including
data types, angular sampling defaults and CUDA thread block configurations.
"""

import numpy as np
import torch
from numba import cuda

# ---------------------------------------------------------------------------
# Data Types and Numerical Constants
# ---------------------------------------------------------------------------

_DTYPE = np.float32
"""Default data type for host-side numerical computations (numpy.float32)."""

_TORCH_DTYPE = torch.float32
"""Default tensor data type for images, sinograms and circus functions."""

# ---------------------------------------------------------------------------
# Sampling Parameters
# ---------------------------------------------------------------------------

_FULL_ANGLE = 360
"""Angular range swept by the trace transform, in degrees."""

_ANGLE_STEP = 1
"""Default angular resolution of the sinogram, in degrees."""

_HERMITE_DOMAIN = 10.0
"""Half-width of the interval [-d, d] the Hermite functions are sampled on."""

# ---------------------------------------------------------------------------
# CUDA Thread Block Configurations
# ---------------------------------------------------------------------------

# 2D blocks: 16x16 = 256 threads per block, one thread per output pixel
_TPB_2D = (16, 16)
"""CUDA threads-per-block for 2D resampling kernels: (16, 16) = 256 threads."""

# ---------------------------------------------------------------------------
# CUDA JIT Decorators
# ---------------------------------------------------------------------------

# Interpolation weights tolerate the reduced precision of fastmath
_FASTMATH_DECORATOR = cuda.jit(cache=True, fastmath=True)
"""Numba CUDA JIT decorator with fastmath enabled for resampling kernels."""
