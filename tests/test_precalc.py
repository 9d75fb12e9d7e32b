import pytest
import torch

from tracetransform.errors import PrecomputeMisuseError
from tracetransform.functionals.precalc import (
    PFunctional2Precalc,
    Precalc,
    TFunctional67Precalc,
    with_precalc,
)


def test_destroy_releases_buffers():
    precalc = TFunctional67Precalc(4, 3)
    assert precalc.prescan.shape == (4, 3)
    assert precalc.medians.dtype == torch.int64
    precalc.destroy()
    assert precalc.released
    assert precalc.prescan is None
    assert precalc.indices is None


def test_destroy_twice():
    precalc = PFunctional2Precalc(4, 3)
    precalc.destroy()
    with pytest.raises(PrecomputeMisuseError, match="twice"):
        precalc.destroy()


def test_context_manager_releases_on_error():
    with pytest.raises(RuntimeError, match="boom"):
        with PFunctional2Precalc(4, 3) as precalc:
            raise RuntimeError("boom")
    assert precalc.released


def test_context_manager_after_manual_destroy():
    with Precalc(2, 2) as precalc:
        precalc.destroy()
    assert precalc.released


def test_check():
    precalc = Precalc(3, 2, dtype=torch.float64)
    precalc.check(torch.zeros((3, 2), dtype=torch.float64))
    with pytest.raises(PrecomputeMisuseError, match=r"\(3, 2\)"):
        precalc.check(torch.zeros((2, 3), dtype=torch.float64))
    with pytest.raises(PrecomputeMisuseError):
        precalc.check(torch.zeros((3, 2), dtype=torch.float32))


def test_repr():
    precalc = Precalc(3, 2)
    assert repr(precalc) == "Precalc(rows=3, cols=2, live)"
    precalc.destroy()
    assert repr(precalc) == "Precalc(rows=3, cols=2, released)"


class TestWithPrecalc:
    def test_temporary_context_is_released(self):
        created = []

        def prepare(rows, cols, device=None, dtype=None):
            precalc = Precalc(rows, cols, device=device, dtype=dtype)
            created.append(precalc)
            return precalc

        @with_precalc(prepare)
        def total(data, precalc):
            assert not precalc.released
            return data.sum(dim=0)

        assert total(torch.ones(3)).item() == 3.0
        assert len(created) == 1
        assert created[0].released
        assert (created[0].rows, created[0].cols) == (3, 1)
        assert total.prepare is prepare

    def test_without_context(self):
        @with_precalc()
        def first(data):
            return data[0]

        assert first.prepare is None
        assert first(torch.tensor([4.0, 5.0])).item() == 4.0
        assert first(torch.tensor([[4.0, 1.0], [5.0, 2.0]])).tolist() == [4.0, 1.0]
