"""T- and P-functionals of the trace transform.

This subpackage contains the reductions applied to traces (T-functionals)
and to sinogram columns (P-functionals), their precompute contexts and the
functional selection wrappers.
"""

from .median import weighted_median, weighted_median_of

from .tfunctionals import (
    tfunctional_radon,
    tfunctional_1,
    tfunctional_2,
    tfunctional_3,
    tfunctional_4,
    tfunctional_5,
    tfunctional_6,
    tfunctional_7,
    tfunctional_12_prepare,
    tfunctional_3_prepare,
    tfunctional_4_prepare,
    tfunctional_5_prepare,
    tfunctional_67_prepare,
)

from .pfunctionals import (
    pfunctional_1,
    pfunctional_2,
    pfunctional_3,
    pfunctional_hermite,
    pfunctional_2_prepare,
    pfunctional_3_prepare,
    pfunctional_hermite_prepare,
    hermite_polynomial,
    hermite_function,
)

from .precalc import Precalc

from .selection import (
    TFunctional,
    PFunctional,
    TFunctionalWrapper,
    PFunctionalWrapper,
    parse_tfunctionals,
    parse_pfunctionals,
)

__all__ = [
    'weighted_median',
    'weighted_median_of',
    'tfunctional_radon',
    'tfunctional_1',
    'tfunctional_2',
    'tfunctional_3',
    'tfunctional_4',
    'tfunctional_5',
    'tfunctional_6',
    'tfunctional_7',
    'tfunctional_12_prepare',
    'tfunctional_3_prepare',
    'tfunctional_4_prepare',
    'tfunctional_5_prepare',
    'tfunctional_67_prepare',
    'pfunctional_1',
    'pfunctional_2',
    'pfunctional_3',
    'pfunctional_hermite',
    'pfunctional_2_prepare',
    'pfunctional_3_prepare',
    'pfunctional_hermite_prepare',
    'hermite_polynomial',
    'hermite_function',
    'Precalc',
    'TFunctional',
    'PFunctional',
    'TFunctionalWrapper',
    'PFunctionalWrapper',
    'parse_tfunctionals',
    'parse_pfunctionals',
]
