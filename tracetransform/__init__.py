# tracetransform/__init__.py
"""Trace transform and circus functions.

Computes rotation- and translation-robust image features: the sinogram of
an image under a chosen T-functional, and circus functions reducing every
sinogram angle with a P-functional, on CPU or CUDA through PyTorch and Numba.
"""

from .errors import (
    TraceTransformError,
    InvalidInputError,
    InvalidFunctionalSelectionError,
    PrecomputeMisuseError,
)

from .geometry import Point, Segment

from .image import (
    as_image,
    interpolate,
    rotate,
    resize,
    pad,
)

from .trace import TraceIterator, reanchor, extract_traces, trace_iterators

from .functionals import (
    TFunctional,
    PFunctional,
    TFunctionalWrapper,
    PFunctionalWrapper,
    parse_tfunctionals,
    parse_pfunctionals,
    weighted_median,
)

from .sinogram import get_sinogram, get_sinograms

from .orthonormal import OrthonormalSinogram, nearest_orthonormal_sinogram

from .circus import (
    zscore,
    get_circus_function,
    get_circus_functions,
    get_orthonormal_circus_functions,
)

from .pipeline import TraceTransformResult, trace_transform

__version__ = '1.0.0'

__all__ = [
    'TraceTransformError',
    'InvalidInputError',
    'InvalidFunctionalSelectionError',
    'PrecomputeMisuseError',
    'Point',
    'Segment',
    'as_image',
    'interpolate',
    'rotate',
    'resize',
    'pad',
    'TraceIterator',
    'trace_iterators',
    'reanchor',
    'extract_traces',
    'TFunctional',
    'PFunctional',
    'TFunctionalWrapper',
    'PFunctionalWrapper',
    'parse_tfunctionals',
    'parse_pfunctionals',
    'weighted_median',
    'get_sinogram',
    'get_sinograms',
    'OrthonormalSinogram',
    'nearest_orthonormal_sinogram',
    'zscore',
    'get_circus_function',
    'get_circus_functions',
    'get_orthonormal_circus_functions',
    'TraceTransformResult',
    'trace_transform',
]
