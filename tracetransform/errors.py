"""Exception types raised by the tracetransform package."""


class TraceTransformError(Exception):
    """Base class for all errors raised by tracetransform."""


class InvalidInputError(TraceTransformError, ValueError):
    """An image, sinogram or argument does not satisfy its preconditions.

    Raised for empty or non two-dimensional grids, non-square images where a
    padded (square) image is required, non-positive angle steps and unknown
    centre policies.
    """


class InvalidFunctionalSelectionError(TraceTransformError, ValueError):
    """A functional identifier is unknown or the selection is inconsistent.

    Examples are an unparseable identifier, a Hermite functional without an
    order, or regular and orthonormal P-functionals requested together.
    """


class PrecomputeMisuseError(TraceTransformError, RuntimeError):
    """A precompute context was used outside of its contract.

    The context was created for different dimensions, device or dtype than
    the data it is applied to, or it was used after being destroyed. This
    signals a programming error, not bad input.
    """
