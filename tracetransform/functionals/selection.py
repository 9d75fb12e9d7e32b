"""Functional selection: closed sets of T- and P-functionals.

The functional sets are fixed enumerations. A wrapper carries the enumerated
functional, its display name and its parameters, and dispatches evaluation
and precompute preparation through a lookup table.
"""

import dataclasses
import enum
import re
from typing import Optional

from ..errors import InvalidFunctionalSelectionError
from . import pfunctionals, tfunctionals


class TFunctional(enum.Enum):
    RADON = "Radon"
    T1 = "T1"
    T2 = "T2"
    T3 = "T3"
    T4 = "T4"
    T5 = "T5"
    T6 = "T6"
    T7 = "T7"


class PFunctional(enum.Enum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    HERMITE = "Hermite"


_TFUNCTIONALS = {
    TFunctional.RADON: tfunctionals.tfunctional_radon,
    TFunctional.T1: tfunctionals.tfunctional_1,
    TFunctional.T2: tfunctionals.tfunctional_2,
    TFunctional.T3: tfunctionals.tfunctional_3,
    TFunctional.T4: tfunctionals.tfunctional_4,
    TFunctional.T5: tfunctionals.tfunctional_5,
    TFunctional.T6: tfunctionals.tfunctional_6,
    TFunctional.T7: tfunctionals.tfunctional_7,
}

_PFUNCTIONALS = {
    PFunctional.P1: pfunctionals.pfunctional_1,
    PFunctional.P2: pfunctionals.pfunctional_2,
    PFunctional.P3: pfunctionals.pfunctional_3,
}

_T_IDENTIFIER = re.compile(r"^(?:(?P<radon>radon)|t?(?P<index>[0-7]))$", re.IGNORECASE)
_P_IDENTIFIER = re.compile(
    r"^(?:p?(?P<index>[1-3])|(?:h|hermite)\(?(?P<order>\d+)\)?)$", re.IGNORECASE)


@dataclasses.dataclass(frozen=True)
class TFunctionalWrapper:
    """A selected T-functional.

    Attributes
    ----------
    name : str
        Display name, e.g. ``"Radon"`` or ``"T3"``.
    functional : TFunctional
        The enumerated functional.
    """

    name: str
    functional: TFunctional

    @classmethod
    def parse(cls, identifier):
        """Parse an identifier such as ``"0"``, ``"Radon"``, ``"3"`` or ``"T3"``.

        Raises
        ------
        InvalidFunctionalSelectionError
            If the identifier names no T-functional.
        """
        if isinstance(identifier, TFunctional):
            return cls(identifier.value, identifier)
        match = _T_IDENTIFIER.match(str(identifier).strip())
        if match is None:
            raise InvalidFunctionalSelectionError(
                f"Unknown T-functional {identifier!r}")
        if match.group("radon") or match.group("index") == "0":
            functional = TFunctional.RADON
        else:
            functional = TFunctional("T" + match.group("index"))
        return cls(functional.value, functional)

    def prepare(self, rows, cols, device=None, dtype=None):
        """Precompute context for traces of length `rows`, or None if not needed."""
        prepare = _TFUNCTIONALS[self.functional].prepare
        if prepare is None:
            return None
        return prepare(rows, cols, device=device, dtype=dtype)

    def __call__(self, data, precalc=None):
        return _TFUNCTIONALS[self.functional](data, precalc)


@dataclasses.dataclass(frozen=True)
class PFunctionalWrapper:
    """A selected P-functional.

    Attributes
    ----------
    name : str
        Display name, e.g. ``"P1"`` or ``"H2"``.
    functional : PFunctional
        The enumerated functional.
    order : int, optional
        Order of a Hermite functional.
    center : int, optional
        Centre row of a Hermite functional, bound once the orthonormal
        sinogram is known (see `with_center`).
    """

    name: str
    functional: PFunctional
    order: Optional[int] = None
    center: Optional[int] = None

    @classmethod
    def parse(cls, identifier):
        """Parse ``"1"``-``"3"``, ``"P1"``-``"P3"``, ``"H<n>"`` or ``"Hermite(<n>)"``.

        Raises
        ------
        InvalidFunctionalSelectionError
            If the identifier names no P-functional.
        """
        if isinstance(identifier, PFunctional):
            if identifier is PFunctional.HERMITE:
                raise InvalidFunctionalSelectionError(
                    "Hermite P-functional requires an order, e.g. 'H2'")
            return cls(identifier.value, identifier)
        match = _P_IDENTIFIER.match(str(identifier).strip())
        if match is None:
            raise InvalidFunctionalSelectionError(
                f"Unknown P-functional {identifier!r}")
        if match.group("order") is not None:
            order = int(match.group("order"))
            return cls(f"H{order}", PFunctional.HERMITE, order=order)
        functional = PFunctional("P" + match.group("index"))
        return cls(functional.value, functional)

    @property
    def orthonormal(self):
        """Whether the functional requires an orthonormal sinogram."""
        return self.functional is PFunctional.HERMITE

    def with_center(self, center):
        """Copy of this wrapper with the Hermite centre bound to `center`."""
        return dataclasses.replace(self, center=int(center))

    def prepare(self, rows, cols, device=None, dtype=None):
        if self.orthonormal:
            return pfunctionals.pfunctional_hermite_prepare(
                rows, cols, self.order, self.center, device=device, dtype=dtype)
        prepare = _PFUNCTIONALS[self.functional].prepare
        if prepare is None:
            return None
        return prepare(rows, cols, device=device, dtype=dtype)

    def __call__(self, data, precalc=None):
        if self.orthonormal:
            return pfunctionals.pfunctional_hermite(data, self.order, self.center, precalc)
        return _PFUNCTIONALS[self.functional](data, precalc)


def _as_list(identifiers):
    if isinstance(identifiers, str):
        return [item for item in identifiers.split(",") if item.strip()]
    return list(identifiers)


def parse_tfunctionals(identifiers):
    """Parse an ordered selection of T-functionals.

    Parameters
    ----------
    identifiers : str or iterable
        Comma separated string (``"0,1,3"``) or sequence of identifiers,
        enum members or wrappers.

    Returns
    -------
    list of TFunctionalWrapper

    Raises
    ------
    InvalidFunctionalSelectionError
        If an identifier is invalid or the selection is empty.
    """
    wrappers = [item if isinstance(item, TFunctionalWrapper) else TFunctionalWrapper.parse(item)
                for item in _as_list(identifiers)]
    if not wrappers:
        raise InvalidFunctionalSelectionError("No T-functional selected")
    return wrappers


def parse_pfunctionals(identifiers):
    """Parse an ordered selection of P-functionals.

    Regular (P1-P3) and orthonormal (Hermite) P-functionals operate on
    different sinograms and cannot be mixed in one selection.

    Returns
    -------
    list of PFunctionalWrapper

    Raises
    ------
    InvalidFunctionalSelectionError
        If an identifier is invalid or regular and orthonormal functionals
        are mixed.
    """
    wrappers = [item if isinstance(item, PFunctionalWrapper) else PFunctionalWrapper.parse(item)
                for item in _as_list(identifiers)]
    orthonormal = {wrapper.orthonormal for wrapper in wrappers}
    if len(orthonormal) > 1:
        raise InvalidFunctionalSelectionError(
            "Cannot mix orthonormal and regular P-functionals")
    return wrappers
