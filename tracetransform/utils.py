"""Utility classes and helper functions for the tracetransform package.

This module provides utility classes and functions for device management,
PyTorch-CUDA bridging, stream caching, tensor conversion and CUDA grid
computation.
"""

import math
import numpy as np
import torch
from numba import cuda

from .constants import _TPB_2D, _TORCH_DTYPE


# ============================================================================
# Device Management Utilities
# ============================================================================

class DeviceManager:
    """Utilities for managing PyTorch tensor devices."""

    @staticmethod
    def get_device(tensor):
        """Get the device of a PyTorch tensor.

        Parameters
        ----------
        tensor : torch.Tensor
            Tensor whose device to determine.

        Returns
        -------
        torch.device
            Device of the tensor or CPU if unavailable.

        Examples
        --------
        >>> DeviceManager.get_device(torch.tensor([1, 2, 3]))
        device(type='cpu')
        """
        return tensor.device if hasattr(tensor, "device") else torch.device("cpu")


# ============================================================================
# PyTorch-CUDA Bridge
# ============================================================================

class TorchCUDABridge:
    """Bridge between PyTorch tensors and Numba CUDA arrays."""

    @staticmethod
    def tensor_to_cuda_array(tensor):
        """Convert a PyTorch CUDA tensor to a Numba CUDA DeviceNDArray.

        Provides a zero-copy view of a detached PyTorch tensor as a Numba CUDA
        array. The returned array shares memory with the original tensor.

        Parameters
        ----------
        tensor : torch.Tensor
            PyTorch tensor on a CUDA device.

        Returns
        -------
        numba.cuda.cudadrv.devicearray.DeviceNDArray
            Numba CUDA array view sharing memory with `tensor`.

        Raises
        ------
        ValueError
            If `tensor` is not on a CUDA device.
        """
        if not tensor.is_cuda:
            raise ValueError("Tensor must be on CUDA device")
        return cuda.as_cuda_array(tensor.detach())


# ============================================================================
# Stream Management (cached external Numba stream)
# ============================================================================

_cached_stream_ptr = None
_cached_numba_stream = None


def _get_numba_external_stream_for(pt_stream=None):
    """Return a cached numba.cuda.external_stream for the current PyTorch CUDA stream.

    Caches by the underlying CUDA stream pointer to avoid repeated construction.

    Parameters
    ----------
    pt_stream : torch.cuda.Stream, optional
        PyTorch CUDA stream. If None, uses current stream.

    Returns
    -------
    numba.cuda.cudadrv.driver.Stream
        Numba external stream wrapper around PyTorch CUDA stream.
    """
    global _cached_stream_ptr, _cached_numba_stream
    if pt_stream is None:
        pt_stream = torch.cuda.current_stream()
    ptr = int(pt_stream.cuda_stream)
    if _cached_stream_ptr == ptr and _cached_numba_stream is not None:
        return _cached_numba_stream
    numba_stream = cuda.external_stream(pt_stream.cuda_stream)
    _cached_stream_ptr = ptr
    _cached_numba_stream = numba_stream
    return numba_stream


# ============================================================================
# Tensor Conversion
# ============================================================================

_NP_TO_TORCH = {
    np.float32: torch.float32,
    np.float64: torch.float64,
}


def _as_tensor(data, dtype=None, device=None):
    """Convert array-like input to a floating point torch tensor.

    Parameters
    ----------
    data : array-like or torch.Tensor
        Input values. NumPy arrays and nested sequences are copied into a new
        tensor; tensors are converted only when dtype or device differ.
    dtype : numpy.dtype or torch.dtype, optional
        Desired data type. Floating point tensors keep their dtype when None;
        anything else becomes `_TORCH_DTYPE`.
    device : torch.device, optional
        Target device. If None, tensors stay where they are and other inputs
        land on the CPU.

    Returns
    -------
    torch.Tensor
        Floating point tensor holding `data`.
    """
    if dtype is not None and not isinstance(dtype, torch.dtype):
        dtype = _NP_TO_TORCH.get(np.dtype(dtype).type, _TORCH_DTYPE)
    if not isinstance(data, torch.Tensor):
        data = torch.as_tensor(np.asarray(data))
    if dtype is None:
        dtype = data.dtype if data.is_floating_point() else _TORCH_DTYPE
    device = DeviceManager.get_device(data) if device is None else device
    return data.to(dtype=dtype, device=device)


# ============================================================================
# CUDA Grid Computation
# ============================================================================

def _grid_2d(n1, n2, tpb=_TPB_2D):
    """Compute 2D CUDA grid and block dimensions.

    Parameters
    ----------
    n1 : int
        Number of elements along the first dimension (e.g., image rows).
    n2 : int
        Number of elements along the second dimension (e.g., image columns).
    tpb : tuple of int, optional
        Threads per block (default is `_TPB_2D`).

    Returns
    -------
    grid : tuple of int
        Blocks count per axis.
    tpb : tuple of int
        Threads per block per axis.

    Examples
    --------
    >>> grid, tpb = _grid_2d(365, 365)
    >>> grid
    (23, 23)
    """
    return (math.ceil(n1 / tpb[0]), math.ceil(n2 / tpb[1])), tpb
