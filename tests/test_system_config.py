"""
설정 및 캘리브레이션 테스트
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parents[1]))

import pytest
import yaml

from stereo_input.config.dataset_layout import DatasetLayout
from stereo_input.config.system_config import (
    SystemConfig,
    DatasetConfig,
    CalibrationConfig,
    load_config,
    create_default_config
)
from stereo_input.input.calibration import CameraIntrinsics, RGBDCalibration, StereoCalibration


class TestCalibration:
    """캘리브레이션 값 테스트"""

    def test_sizes(self):
        rgb = CameraIntrinsics(fx=1.0, fy=1.0, cx=0.5, cy=0.5, width=1242, height=375)
        d = CameraIntrinsics(fx=1.0, fy=1.0, cx=0.5, cy=0.5, width=621, height=188)
        calib = RGBDCalibration(intrinsics_rgb=rgb, intrinsics_d=d)

        assert calib.rgb_size == (1242, 375)
        assert calib.depth_size == (621, 188)

    def test_frozen(self):
        stereo = StereoCalibration(baseline_m=0.537, focal_length_px=707.0)
        with pytest.raises(AttributeError):
            stereo.baseline_m = 1.0

    def test_from_dict_defaults_depth_to_rgb(self):
        calib = RGBDCalibration.from_dict({
            'intrinsics_rgb': {'fx': 1, 'fy': 1, 'cx': 0, 'cy': 0, 'width': 64, 'height': 48}
        })
        assert calib.depth_size == (64, 48)

    def test_round_trip(self):
        calib = RGBDCalibration.from_dict(CalibrationConfig().to_dict())
        assert RGBDCalibration.from_dict(calib.to_dict()) == calib

        stereo = StereoCalibration.from_dict(CalibrationConfig().to_stereo_dict())
        assert StereoCalibration.from_dict(stereo.to_dict()) == stereo


class TestCalibrationConfig:
    """캘리브레이션 설정 테스트"""

    def test_depth_size_override(self):
        config = CalibrationConfig(width=100, height=50, depth_width=50, depth_height=25)
        calib = RGBDCalibration.from_dict(config.to_dict())

        assert calib.rgb_size == (100, 50)
        assert calib.depth_size == (50, 25)

    def test_stereo_uses_fx(self):
        config = CalibrationConfig(fx=700.0, baseline_m=0.54)
        stereo = StereoCalibration.from_dict(config.to_stereo_dict())

        assert stereo.focal_length_px == 700.0
        assert stereo.baseline_m == 0.54


class TestDatasetConfig:
    """데이터셋 설정 테스트"""

    def test_default_preset(self):
        assert DatasetConfig().to_layout() == DatasetLayout.kitti_odometry()

    def test_overrides(self):
        config = DatasetConfig(
            preset="kitti-odometry-dispnet",
            overrides={'depth_folder': '', 'depth_fname_format': ''}
        )
        layout = config.to_layout()

        assert not layout.has_precomputed_depth
        assert layout.left_gray_folder == "image_0"

    def test_unknown_override(self):
        config = DatasetConfig(overrides={'depth_dir': 'x'})
        with pytest.raises(ValueError):
            config.to_layout()


class TestSystemConfig:
    """YAML 설정 테스트"""

    def test_save_and_load(self, tmp_path):
        config = SystemConfig()
        config.dataset.root_dir = "/data/kitti/sequences/06"
        config.dataset.overrides = {'depth_folder': ''}
        config.run.frame_offset = 10
        config.output.log_level = "DEBUG"

        path = tmp_path / "config.yaml"
        config.save(str(path))
        loaded = load_config(str(path))

        assert loaded == config

    def test_partial_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({'run': {'max_frames': 5}}))

        config = load_config(str(path))

        assert config.run.max_frames == 5
        assert config.run.frame_offset == 0
        assert config.dataset.preset == "kitti-odometry"

    def test_missing_file(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))
        assert config == SystemConfig()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == SystemConfig()

    def test_create_default_config(self, tmp_path):
        path = tmp_path / "default.yaml"
        config = create_default_config(str(path))

        assert path.exists()
        assert load_config(str(path)) == config
