import math

import numpy as np
import pytest
import torch
import torch.testing

from tracetransform.geometry import image_origin
from tracetransform.image import pad, resize, rotate
from tracetransform.pipeline import trace_transform
from tracetransform.sinogram import get_sinograms

requires_cuda = pytest.mark.skipif(
    not torch.cuda.is_available(), reason="CUDA device not available"
)


@requires_cuda
def test_rotate_matches_cpu(gaussian_image):
    padded = pad(gaussian_image)
    origin = image_origin(*padded.shape)
    for degrees in (0, 33, 90, 211):
        cpu = rotate(padded, origin, math.radians(degrees))
        gpu = rotate(padded.cuda(), origin, math.radians(degrees))
        assert gpu.is_cuda
        torch.testing.assert_close(gpu.cpu(), cpu, atol=1e-4, rtol=1e-4)


@requires_cuda
def test_resize_matches_cpu(gaussian_image):
    cpu = resize(gaussian_image, 30, 25)
    gpu = resize(gaussian_image.cuda(), 30, 25)
    torch.testing.assert_close(gpu.cpu(), cpu, atol=1e-4, rtol=1e-4)


@requires_cuda
def test_sinograms_match_cpu(gaussian_image):
    padded = pad(gaussian_image)
    cpu = get_sinograms(padded, "Radon,T1,T4", 20)
    gpu = get_sinograms(padded.cuda(), "Radon,T1,T4", 20)
    for expected, actual in zip(cpu, gpu):
        assert actual.is_cuda
        torch.testing.assert_close(actual.cpu(), expected, atol=1e-2, rtol=1e-3)


@requires_cuda
def test_pipeline_on_device():
    image = torch.from_numpy(np.random.default_rng(3).random((9, 9)).astype(np.float32))
    result = trace_transform(image.cuda(), "T2", "P1,P3", angle_step=45)
    assert all(values.is_cuda for _, _, values in result.circus)
    assert result.circus_table().shape == (2, 8)
