"""T-functionals: reductions of one projection trace to a scalar.

Every functional accepts a single trace of shape (n,) and returns a 0-d
tensor, or a batch of traces of shape (n, m), one trace per column, and
returns a tensor of shape (m,). The sinogram generator evaluates all offsets
of one angle as a single batch.

The anchored functionals (T1-T7) move the origin of the integration variable
to the weighted median of the trace: the distance t is 0 at the anchor and
only samples from the anchor to the end of the trace contribute.
"""

import math

import torch

from .median import weighted_median, weighted_median_of
from .precalc import (
    TFunctional12Precalc,
    TFunctional345Precalc,
    TFunctional67Precalc,
    with_precalc,
)


def _distances(rows, medians):
    """Signed distance of every row to the anchor of its column, (rows, m)."""
    t = torch.arange(rows, device=medians.device).unsqueeze(1)
    return t - medians.unsqueeze(0)


# ============================================================================
# Radon
# ============================================================================

@with_precalc()
def tfunctional_radon(data):
    """Radon transform: the straight sum of the trace, sum_t f(t)."""
    return data.sum(dim=0)


# ============================================================================
# T1 and T2
# ============================================================================

def tfunctional_12_prepare(rows, cols, device=None, dtype=None):
    """Prepare the shared precompute context of T1 and T2."""
    return TFunctional12Precalc(rows, cols, device=device, dtype=dtype)


def _tfunctional_12(data, precalc, power):
    median = weighted_median(data, prescan=precalc.prescan, out=precalc.medians)
    t = _distances(data.shape[0], median).clamp(min=0).to(data.dtype)
    return (t.pow(power) * data).sum(dim=0)


@with_precalc(tfunctional_12_prepare)
def tfunctional_1(data, precalc):
    """T1: sum_t t f(r), with r = c + t and c the weighted median of f."""
    return _tfunctional_12(data, precalc, 1)


@with_precalc(tfunctional_12_prepare)
def tfunctional_2(data, precalc):
    """T2: sum_t t^2 f(r), with r = c + t and c the weighted median of f."""
    return _tfunctional_12(data, precalc, 2)


# ============================================================================
# T3, T4 and T5
# ============================================================================

def tfunctional_3_prepare(rows, cols, device=None, dtype=None):
    """Prepare T3: kernel exp(5i ln t) t."""
    return TFunctional345Precalc(rows, cols, 5, "t", device=device, dtype=dtype)


def tfunctional_4_prepare(rows, cols, device=None, dtype=None):
    """Prepare T4: kernel exp(3i ln t)."""
    return TFunctional345Precalc(rows, cols, 3, "one", device=device, dtype=dtype)


def tfunctional_5_prepare(rows, cols, device=None, dtype=None):
    """Prepare T5: kernel exp(4i ln t) sqrt(t)."""
    return TFunctional345Precalc(rows, cols, 4, "sqrt", device=device, dtype=dtype)


def _tfunctional_345(data, precalc):
    """Magnitude of the complex integral of the precomputed kernel.

    The anchor is the weighted median of sqrt(f). The kernel is zero at t = 0
    (ln 0 is undefined, the term is skipped) and negative distances are
    mapped onto that zero entry.
    """
    median = weighted_median(data, sqrt=True, prescan=precalc.prescan,
                             out=precalc.medians)
    t = _distances(data.shape[0], median).clamp(min=0)
    real = (precalc.real[t] * data).sum(dim=0)
    imag = (precalc.imag[t] * data).sum(dim=0)
    return torch.hypot(real, imag)


@with_precalc(tfunctional_3_prepare)
def tfunctional_3(data, precalc):
    """T3: |sum_{t>0} exp(5i ln t) t f(r1)|, r1 anchored at the median of sqrt(f)."""
    return _tfunctional_345(data, precalc)


@with_precalc(tfunctional_4_prepare)
def tfunctional_4(data, precalc):
    """T4: |sum_{t>0} exp(3i ln t) f(r1)|, r1 anchored at the median of sqrt(f)."""
    return _tfunctional_345(data, precalc)


@with_precalc(tfunctional_5_prepare)
def tfunctional_5(data, precalc):
    """T5: |sum_{t>0} exp(4i ln t) sqrt(t) f(r1)|, r1 anchored at the median of sqrt(f)."""
    return _tfunctional_345(data, precalc)


# ============================================================================
# T6 and T7
# ============================================================================

def tfunctional_67_prepare(rows, cols, device=None, dtype=None):
    """Prepare the shared precompute context of T6 and T7."""
    return TFunctional67Precalc(rows, cols, device=device, dtype=dtype)


def _weighted_median_on_domain(data, precalc, domain, values):
    """Weighted median of `values` on `domain`, weights sqrt(f).

    Samples outside the domain are pushed to the end of the sort with zero
    weight. A trace without samples in its domain evaluates to zero.
    """
    precalc.weighted.copy_(values)
    precalc.weighted.masked_fill_(~domain, math.inf)
    weights = torch.where(domain, torch.sqrt(data), torch.zeros_like(data))
    result = weighted_median_of(
        precalc.weighted, weights,
        extracted=precalc.extracted,
        indices=precalc.indices,
        permuted=precalc.permuted,
        prescan=precalc.prescan,
        out=precalc.medians,
    )
    return torch.where(torch.isinf(result), torch.zeros_like(result), result)


@with_precalc(tfunctional_67_prepare)
def tfunctional_6(data, precalc):
    """T6: weighted median of t f(r1) for t > 0, with weights sqrt(f(r1)).

    The anchor r1 = 0 is the weighted median of sqrt(f).
    """
    median = weighted_median(data, sqrt=True, prescan=precalc.prescan,
                             out=precalc.medians)
    t = _distances(data.shape[0], median)
    return _weighted_median_on_domain(data, precalc, t > 0, t.to(data.dtype) * data)


@with_precalc(tfunctional_67_prepare)
def tfunctional_7(data, precalc):
    """T7: weighted median of f(r) for t >= 0, with weights sqrt(f(r)).

    The anchor r = 0 is the weighted median of f.
    """
    median = weighted_median(data, prescan=precalc.prescan, out=precalc.medians)
    t = _distances(data.shape[0], median)
    return _weighted_median_on_domain(data, precalc, t >= 0, data)
