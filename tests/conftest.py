import numpy as np
import pytest
import torch


@pytest.fixture
def generator():
    """Seeded torch generator for reproducible random traces."""
    return torch.Generator().manual_seed(1234)


@pytest.fixture
def gaussian_image():
    """Smooth 41x41 blob centred on the image, zero at the border."""
    n = 41
    coords = np.arange(n) - (n - 1) / 2
    yy, xx = np.meshgrid(coords, coords, indexing="ij")
    blob = np.exp(-(xx ** 2 + (yy / 1.5) ** 2) / (2 * 5.0 ** 2))
    blob[blob < 1e-3] = 0.0
    return torch.from_numpy(blob.astype(np.float32))


@pytest.fixture
def point_image():
    """5x5 image with a single bright pixel at row 2, column 3."""
    image = torch.zeros((5, 5))
    image[2, 3] = 1.0
    return image
