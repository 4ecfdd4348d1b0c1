"""Tests for the pixel buffer boundary."""

import numpy as np
import pytest

from pathtracer.core.buffer import ImageBuffer


class TestImageBuffer:
    """Tests for ImageBuffer."""

    def test_dimensions_and_layout(self):
        buffer = ImageBuffer(4, 2)
        assert buffer.dimensions() == (4, 2)
        assert buffer.channels().shape == (2, 4, 3)
        assert buffer.channels().dtype == np.float32
        assert np.all(buffer.channels() == 0.0)

    def test_pixel_is_a_view(self):
        buffer = ImageBuffer(4, 2)
        buffer.pixel(3, 1)[:] = (1.0, 0.5, 0.0)
        assert buffer.channels()[1, 3].tolist() == [1.0, 0.5, 0.0]

    def test_to_numpy_is_a_copy(self):
        buffer = ImageBuffer(2, 2)
        copy = buffer.to_numpy()
        copy[...] = 1.0
        assert np.all(buffer.channels() == 0.0)

    def test_from_array(self):
        data = np.arange(18, dtype=np.float32).reshape(2, 3, 3)
        buffer = ImageBuffer.from_array(data)
        assert buffer.dimensions() == (3, 2)
        np.testing.assert_array_equal(buffer.channels(), data)

    def test_from_array_wrong_shape(self):
        with pytest.raises(ValueError):
            ImageBuffer.from_array(np.zeros((2, 2)))

    def test_negative_dimensions(self):
        with pytest.raises(ValueError):
            ImageBuffer(-1, 4)
