"""
테스트 공용 fixture

작은 KITTI odometry 형식 임시 데이터셋을 생성합니다.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parents[1]))

import cv2
import numpy as np
import pytest

from stereo_input.config.dataset_layout import DatasetLayout, format_frame_name
from stereo_input.input.calibration import CameraIntrinsics, RGBDCalibration, StereoCalibration

WIDTH = 32
HEIGHT = 24


def frame_images(frame_idx: int):
    """프레임마다 내용이 다른 결정적 이미지"""
    rng = np.random.default_rng(frame_idx)
    return {
        'left_gray': rng.integers(0, 255, (HEIGHT, WIDTH), dtype=np.uint8),
        'right_gray': rng.integers(0, 255, (HEIGHT, WIDTH), dtype=np.uint8),
        'left_color': rng.integers(0, 255, (HEIGHT, WIDTH, 3), dtype=np.uint8),
        'right_color': rng.integers(0, 255, (HEIGHT, WIDTH, 3), dtype=np.uint8),
        'depth': rng.integers(500, 20000, (HEIGHT, WIDTH), dtype=np.uint16),
    }


def write_frame(root: Path, layout: DatasetLayout, frame_idx: int, skip=()):
    """레이아웃 규칙대로 한 프레임의 파일을 기록"""
    images = frame_images(frame_idx)
    targets = {
        'left_gray': (layout.left_gray_folder, layout.fname_format),
        'right_gray': (layout.right_gray_folder, layout.fname_format),
        'left_color': (layout.left_color_folder, layout.fname_format),
        'right_color': (layout.right_color_folder, layout.fname_format),
    }
    if layout.depth_folder:
        targets['depth'] = (layout.depth_folder, layout.depth_fname_format)

    for name, (folder, fname_format) in targets.items():
        if name in skip:
            continue
        path = root / folder / format_frame_name(fname_format, frame_idx)
        path.parent.mkdir(parents=True, exist_ok=True)
        assert cv2.imwrite(str(path), images[name])

    return images


@pytest.fixture
def layout():
    """PNG 깊이를 사용하는 KITTI odometry 레이아웃"""
    return DatasetLayout.kitti_odometry().replace(depth_fname_format="%06d.png")


@pytest.fixture
def no_depth_layout():
    return DatasetLayout.kitti_odometry().replace(depth_folder="", depth_fname_format="")


@pytest.fixture
def calibration():
    intrinsics = CameraIntrinsics(fx=50.0, fy=50.0, cx=16.0, cy=12.0, width=WIDTH, height=HEIGHT)
    return RGBDCalibration(intrinsics_rgb=intrinsics, intrinsics_d=intrinsics)


@pytest.fixture
def stereo_calibration():
    return StereoCalibration(baseline_m=0.5, focal_length_px=50.0)


@pytest.fixture
def make_dataset(tmp_path):
    """(레이아웃, 프레임 수) → 시퀀스 루트"""
    def _make(layout: DatasetLayout, num_frames: int, sequence: str = "06"):
        root = tmp_path / sequence
        for i in range(num_frames):
            write_frame(root, layout, i)
        return root
    return _make
