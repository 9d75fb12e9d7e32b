import pytest
import torch
import torch.testing

from tracetransform.errors import InvalidFunctionalSelectionError
from tracetransform.functionals.precalc import TFunctional12Precalc
from tracetransform.functionals.selection import (
    PFunctional,
    PFunctionalWrapper,
    TFunctional,
    TFunctionalWrapper,
    parse_pfunctionals,
    parse_tfunctionals,
)


class TestTFunctionalSelection:
    @pytest.mark.parametrize(
        "identifier,name",
        [
            pytest.param("0", "Radon", id="index zero"),
            pytest.param("Radon", "Radon", id="name"),
            pytest.param("radon", "Radon", id="lowercase"),
            pytest.param("3", "T3", id="index"),
            pytest.param("T7", "T7", id="prefixed"),
            pytest.param(" t1 ", "T1", id="whitespace"),
            pytest.param(TFunctional.T5, "T5", id="enum"),
        ],
    )
    def test_parse(self, identifier, name):
        assert TFunctionalWrapper.parse(identifier).name == name

    @pytest.mark.parametrize("identifier", ["8", "T9", "P1", "", "radon2"])
    def test_parse_invalid(self, identifier):
        with pytest.raises(InvalidFunctionalSelectionError):
            TFunctionalWrapper.parse(identifier)

    def test_comma_separated_keeps_order(self):
        names = [t.name for t in parse_tfunctionals("3, 0,T1")]
        assert names == ["T3", "Radon", "T1"]

    def test_sequence_and_wrappers(self):
        wrapper = TFunctionalWrapper.parse("T2")
        selection = parse_tfunctionals([wrapper, TFunctional.RADON, "6"])
        assert selection[0] is wrapper
        assert [t.name for t in selection] == ["T2", "Radon", "T6"]

    @pytest.mark.parametrize("identifiers", ["", [], " , "])
    def test_empty_selection(self, identifiers):
        with pytest.raises(InvalidFunctionalSelectionError):
            parse_tfunctionals(identifiers)

    def test_dispatch(self):
        radon = TFunctionalWrapper.parse("Radon")
        assert radon.prepare(4, 2) is None
        torch.testing.assert_close(radon(torch.tensor([1.0, 2.0])), torch.tensor(3.0))

        t1 = TFunctionalWrapper.parse("T1")
        precalc = t1.prepare(4, 2)
        assert isinstance(precalc, TFunctional12Precalc)
        precalc.destroy()


class TestPFunctionalSelection:
    @pytest.mark.parametrize(
        "identifier,name,order",
        [
            pytest.param("1", "P1", None, id="index"),
            pytest.param("P3", "P3", None, id="prefixed"),
            pytest.param("H3", "H3", 3, id="hermite short"),
            pytest.param("Hermite(2)", "H2", 2, id="hermite long"),
            pytest.param("h0", "H0", 0, id="hermite order zero"),
            pytest.param(PFunctional.P2, "P2", None, id="enum"),
        ],
    )
    def test_parse(self, identifier, name, order):
        wrapper = PFunctionalWrapper.parse(identifier)
        assert wrapper.name == name
        assert wrapper.order == order
        assert wrapper.orthonormal == (order is not None)

    @pytest.mark.parametrize("identifier", ["0", "4", "T1", "H", "Hermite", PFunctional.HERMITE])
    def test_parse_invalid(self, identifier):
        with pytest.raises(InvalidFunctionalSelectionError):
            PFunctionalWrapper.parse(identifier)

    def test_empty_selection_is_allowed(self):
        assert parse_pfunctionals("") == []

    @pytest.mark.parametrize("identifiers", ["P1,H1", ["H2", "3"]])
    def test_mixing_rejected(self, identifiers):
        with pytest.raises(InvalidFunctionalSelectionError, match="mix"):
            parse_pfunctionals(identifiers)

    def test_with_center(self):
        wrapper = PFunctionalWrapper.parse("H1")
        bound = wrapper.with_center(4)
        assert wrapper.center is None
        assert bound.center == 4
        assert bound.name == "H1"

    def test_hermite_requires_center(self):
        with pytest.raises(InvalidFunctionalSelectionError):
            PFunctionalWrapper.parse("H1").prepare(5, 1)

    def test_dispatch(self):
        p1 = PFunctionalWrapper.parse("P1")
        torch.testing.assert_close(p1(torch.tensor([0.0, 1.0, 2.0, 3.0])), torch.tensor(3.0))
        h0 = PFunctionalWrapper.parse("H0").with_center(2)
        with h0.prepare(5, 1) as precalc:
            assert precalc.order == 0
            assert precalc.center == 2
