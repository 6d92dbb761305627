"""Tests for pixel normalization."""

import numpy as np
import pytest

from digit_training.transforms import normalize, normalize_batch


class TestNormalize:
    def test_scaling_law(self) -> None:
        rng = np.random.default_rng(3)
        image = rng.integers(0, 256, size=(28, 28), dtype=np.uint8)
        out = normalize(image)
        for i in range(28):
            for j in range(28):
                assert out[i][j] == pytest.approx(image[i][j] / 255.0, rel=1e-6)

    def test_extremes(self) -> None:
        out = normalize(np.array([[0, 255]], dtype=np.uint8))
        assert out[0, 0] == 0.0
        assert out[0, 1] == 1.0

    def test_non_square_uses_every_column(self) -> None:
        """A 2x5 image must have all five columns scaled, not just two."""
        image = np.full((2, 5), 255, dtype=np.uint8)
        out = normalize(image)
        assert out.shape == (2, 5)
        assert np.all(out == 1.0)

    def test_nested_lists(self) -> None:
        out = normalize([[0, 51], [102, 255]])
        np.testing.assert_allclose(out, [[0.0, 0.2], [0.4, 1.0]], rtol=1e-6)
        assert out.dtype == np.float32

    def test_ragged_rows_rejected(self) -> None:
        with pytest.raises(ValueError, match="Ragged"):
            normalize([[1, 2, 3], [4, 5]])

    def test_input_untouched(self) -> None:
        image = np.array([[10, 20]], dtype=np.uint8)
        normalize(image)
        np.testing.assert_array_equal(image, [[10, 20]])

    def test_rejects_3d(self) -> None:
        with pytest.raises(ValueError):
            normalize(np.zeros((2, 2, 2), dtype=np.uint8))


class TestNormalizeBatch:
    def test_matches_per_image(self) -> None:
        rng = np.random.default_rng(4)
        images = rng.integers(0, 256, size=(3, 6, 4), dtype=np.uint8)
        batch = normalize_batch(images)
        for k in range(3):
            np.testing.assert_array_equal(batch[k], normalize(images[k]))

    def test_rejects_2d(self) -> None:
        with pytest.raises(ValueError):
            normalize_batch(np.zeros((4, 4), dtype=np.uint8))
