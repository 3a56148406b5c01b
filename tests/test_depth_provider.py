#!/usr/bin/env python3
"""
test_depth_provider.py - DepthProvider 단위 테스트

Author: FurSys AI Team
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parents[1]))

import numpy as np
import pytest

from stereo_input.input.calibration import StereoCalibration
from stereo_input.input.depth_provider import DepthProvider, StereoSGBMDepthProvider


class ConstantDisparityProvider(DepthProvider):
    """모든 픽셀 시차가 같은 테스트용 제공자"""

    def __init__(self, disparity: float, depth_scale: float = 1000.0):
        super().__init__(depth_scale=depth_scale)
        self.disparity = disparity

    def compute_depth(self, left_gray, right_gray, stereo_calibration, depth_out):
        disparity = np.full(depth_out.shape, self.disparity, dtype=np.float32)
        self.depth_from_disparity(disparity, stereo_calibration, depth_out)


@pytest.fixture
def stereo():
    return StereoCalibration(baseline_m=0.5, focal_length_px=50.0)


class TestDepthFromDisparity:
    """시차 → 깊이 변환 테스트"""

    def test_metric_conversion(self, stereo):
        provider = ConstantDisparityProvider(10.0)
        depth = np.zeros((2, 3), dtype=np.int16)

        provider.depth_from_disparity(np.full((2, 3), 10.0), stereo, depth)

        # 0.5 m * 50 px / 10 px = 2.5 m = 2500 mm
        assert (depth == 2500).all()

    def test_invalid_disparity_is_zero(self, stereo):
        provider = ConstantDisparityProvider(1.0)
        depth = np.full((1, 3), 99, dtype=np.int16)

        provider.depth_from_disparity(np.array([[0.0, -1.0, 25.0]]), stereo, depth)

        np.testing.assert_array_equal(depth, [[0, 0, 1000]])

    def test_saturates_far_depth(self, stereo):
        provider = ConstantDisparityProvider(1.0)
        depth = np.zeros((1, 1), dtype=np.int16)

        provider.depth_from_disparity(np.array([[0.5]]), stereo, depth)

        assert depth[0, 0] == np.iinfo(np.int16).max

    def test_depth_scale(self, stereo):
        provider = ConstantDisparityProvider(1.0, depth_scale=100.0)
        depth = np.zeros((1, 1), dtype=np.int16)

        provider.depth_from_disparity(np.array([[10.0]]), stereo, depth)

        assert depth[0, 0] == 250

    def test_shape_mismatch(self, stereo):
        provider = ConstantDisparityProvider(1.0)
        with pytest.raises(ValueError):
            provider.depth_from_disparity(
                np.ones((2, 2)), stereo, np.zeros((3, 3), dtype=np.int16)
            )

    def test_writes_in_place(self, stereo):
        provider = ConstantDisparityProvider(5.0)
        depth = np.zeros((4, 4), dtype=np.int16)
        view = depth[:]

        provider.compute_depth(None, None, stereo, depth)

        assert (view == 5000).all()


class TestDepthProviderInterface:
    """인터페이스 테스트"""

    def test_abstract(self):
        with pytest.raises(TypeError):
            DepthProvider()


class TestStereoSGBMDepthProvider:
    """OpenCV SGBM 제공자 테스트"""

    def test_parameter_rounding(self):
        provider = StereoSGBMDepthProvider(num_disparities=100, block_size=4)
        assert provider.num_disparities == 112
        assert provider.block_size == 5

    def test_compute_depth(self, stereo):
        rng = np.random.default_rng(0)
        left = rng.integers(0, 255, (48, 96), dtype=np.uint8)
        right = np.roll(left, -4, axis=1)
        depth = np.zeros((48, 96), dtype=np.int16)

        provider = StereoSGBMDepthProvider(num_disparities=16, block_size=5)
        provider.compute_depth(left, right, stereo, depth)

        assert depth.dtype == np.int16
        assert depth.shape == (48, 96)
        assert (depth >= 0).all()

    def test_resizes_to_depth_buffer(self, stereo):
        rng = np.random.default_rng(1)
        left = rng.integers(0, 255, (48, 96), dtype=np.uint8)
        right = np.roll(left, -4, axis=1)
        depth = np.zeros((24, 48), dtype=np.int16)

        provider = StereoSGBMDepthProvider(num_disparities=16, block_size=5)
        provider.compute_depth(left, right, stereo, depth)

        assert depth.shape == (24, 48)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
