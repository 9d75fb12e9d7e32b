"""Reusable scratch state for the functionals.

A precompute context is prepared once per (functional, trace dimensions)
before the angle loop, handed to every evaluation inside the loop and
destroyed afterwards. Contexts are context managers, so

    with tfunctional_12_prepare(rows, cols) as precalc:
        for angle in angles:
            sinogram[:, angle] = tfunctional_1(traces, precalc)

releases the buffers on every exit path. A context is private to one caller
and must not be shared between concurrent workers.
"""

import functools

import torch

from ..constants import _TORCH_DTYPE
from ..errors import PrecomputeMisuseError


class Precalc:
    """Base class of all precompute contexts.

    Parameters
    ----------
    rows : int
        Length of every trace.
    cols : int
        Number of traces evaluated per call.
    device : torch.device, optional
        Device holding the buffers (default: CPU).
    dtype : torch.dtype, optional
        Sample type (default: `_TORCH_DTYPE`).
    """

    _buffers = ()

    def __init__(self, rows, cols, device=None, dtype=None):
        self.rows = int(rows)
        self.cols = int(cols)
        self.device = torch.device("cpu") if device is None else torch.device(device)
        self.dtype = _TORCH_DTYPE if dtype is None else dtype
        self._released = False

    def _empty(self, *shape, dtype=None):
        return torch.empty(shape, dtype=self.dtype if dtype is None else dtype,
                           device=self.device)

    @property
    def released(self):
        return self._released

    def check(self, data):
        """Verify `data` matches the dimensions this context was prepared for.

        Raises
        ------
        PrecomputeMisuseError
            If the context was destroyed, or `data` differs in shape, device
            or dtype.
        """
        if self._released:
            raise PrecomputeMisuseError(
                f"{type(self).__name__} used after being destroyed")
        if tuple(data.shape) != (self.rows, self.cols):
            raise PrecomputeMisuseError(
                f"{type(self).__name__} prepared for ({self.rows}, {self.cols}), "
                f"used with {tuple(data.shape)}")
        if data.device != self.device or data.dtype != self.dtype:
            raise PrecomputeMisuseError(
                f"{type(self).__name__} prepared for {self.dtype} on {self.device}, "
                f"used with {data.dtype} on {data.device}")

    def destroy(self):
        if self._released:
            raise PrecomputeMisuseError(
                f"{type(self).__name__} destroyed twice")
        for name in self._buffers:
            setattr(self, name, None)
        self._released = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if not self._released:
            self.destroy()
        return False

    def __repr__(self):
        state = "released" if self._released else "live"
        return f"{type(self).__name__}(rows={self.rows}, cols={self.cols}, {state})"


# ============================================================================
# T-functional Contexts
# ============================================================================

class TFunctional12Precalc(Precalc):
    """Running sum and median positions for T1 and T2."""

    _buffers = ("prescan", "medians")

    def __init__(self, rows, cols, device=None, dtype=None):
        super().__init__(rows, cols, device, dtype)
        self.prescan = self._empty(rows, cols)
        self.medians = self._empty(cols, dtype=torch.int64)


class TFunctional345Precalc(Precalc):
    """Complex integration kernel and median scratch for T3, T4 and T5.

    `real` and `imag` hold w(t) cos(k ln t) and w(t) sin(k ln t) for every
    distance t along a trace, with a zero entry at t = 0.
    """

    _buffers = ("real", "imag", "prescan", "medians")

    def __init__(self, rows, cols, frequency, weight, device=None, dtype=None):
        super().__init__(rows, cols, device, dtype)
        t = torch.arange(rows, dtype=torch.float64, device=self.device)
        positive = t[1:]
        phase = frequency * torch.log(positive)
        if weight == "t":
            factor = positive
        elif weight == "sqrt":
            factor = torch.sqrt(positive)
        else:
            factor = torch.ones_like(positive)
        real = torch.zeros_like(t)
        imag = torch.zeros_like(t)
        real[1:] = torch.cos(phase) * factor
        imag[1:] = torch.sin(phase) * factor
        self.real = real.to(self.dtype)
        self.imag = imag.to(self.dtype)
        self.prescan = self._empty(rows, cols)
        self.medians = self._empty(cols, dtype=torch.int64)


class TFunctional67Precalc(Precalc):
    """Sort and permutation buffers for T6 and T7."""

    _buffers = ("prescan", "medians", "extracted", "weighted", "indices", "permuted")

    def __init__(self, rows, cols, device=None, dtype=None):
        super().__init__(rows, cols, device, dtype)
        self.prescan = self._empty(rows, cols)
        self.medians = self._empty(cols, dtype=torch.int64)
        self.extracted = self._empty(rows, cols)
        self.weighted = self._empty(rows, cols)
        self.indices = self._empty(rows, cols, dtype=torch.int64)
        self.permuted = self._empty(rows, cols)


# ============================================================================
# P-functional Contexts
# ============================================================================

class PFunctional2Precalc(Precalc):
    """Sorted copy and median scratch for P2."""

    _buffers = ("sorted", "indices", "prescan", "medians")

    def __init__(self, rows, cols, device=None, dtype=None):
        super().__init__(rows, cols, device, dtype)
        self.sorted = self._empty(rows, cols)
        self.indices = self._empty(rows, cols, dtype=torch.int64)
        self.prescan = self._empty(rows, cols)
        self.medians = self._empty(cols, dtype=torch.int64)


class PFunctional3Precalc(Precalc):
    """Fourier spectrum buffer for P3."""

    _buffers = ("fourier",)

    def __init__(self, rows, cols, device=None, dtype=None):
        super().__init__(rows, cols, device, dtype)
        complex_dtype = torch.complex128 if self.dtype == torch.float64 else torch.complex64
        self.fourier = self._empty(rows, cols, dtype=complex_dtype)


class PFunctionalHermitePrecalc(Precalc):
    """Sampled Hermite function for one (order, center) pair.

    `basis` holds the normalized Hermite function of the given order sampled
    on the discretized domain of a column of length `rows`.
    """

    _buffers = ("basis",)

    def __init__(self, rows, cols, order, center, basis, device=None, dtype=None):
        super().__init__(rows, cols, device, dtype)
        self.order = order
        self.center = center
        self.basis = basis.to(device=self.device, dtype=self.dtype)


# ============================================================================
# Evaluation Wrapper
# ============================================================================

def with_precalc(prepare=None):
    """Decorate a functional operating on a (rows, cols) batch of traces.

    The decorated functional accepts a single trace of shape (n,) or a batch
    of shape (n, m) and an optional precompute context. Without a context a
    temporary one is prepared with `prepare` and destroyed after the call;
    a given context is checked against the data first.

    Parameters
    ----------
    prepare : callable, optional
        Factory ``prepare(rows, cols, device=..., dtype=...)`` of the context
        the functional needs. None for functionals without scratch state.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(data, precalc=None):
            single = data.dim() == 1
            if single:
                data = data.unsqueeze(1)
            if prepare is None:
                result = func(data)
            elif precalc is None:
                with prepare(*data.shape, device=data.device, dtype=data.dtype) as precalc:
                    result = func(data, precalc)
            else:
                precalc.check(data)
                result = func(data, precalc)
            return result[0] if single else result
        wrapper.prepare = prepare
        return wrapper
    return decorator
