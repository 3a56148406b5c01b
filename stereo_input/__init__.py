"""
stereo_input - 스테레오 SLAM 데이터셋 입력 계층

주요 특징:
- 데이터셋 레이아웃 기술자로 다양한 디스크 규약을 동일하게 처리
- 프레임 커서 기반 순차 읽기 (전부 성공 또는 전부 실패)
- 캘리브레이션 크기로 한 번 할당한 버퍼 재사용
- 외부 깊이 제공자 주입 및 교체

Version: 1.0
Author: FurSys AI Team
"""

__version__ = "1.0.0"
__author__ = "FurSys AI Team"

from .config.dataset_layout import (
    DatasetLayout,
    format_frame_name,
    get_preset,
    kitti_odometry_config,
    kitti_odometry_dispnet_config
)

from .input.calibration import (
    CameraIntrinsics,
    RGBDCalibration,
    StereoCalibration
)

from .input.depth_provider import (
    DepthProvider,
    StereoSGBMDepthProvider
)

from .input.input_controller import InputController

__all__ = [
    # Dataset Layout
    'DatasetLayout',
    'format_frame_name',
    'get_preset',
    'kitti_odometry_config',
    'kitti_odometry_dispnet_config',
    # Calibration
    'CameraIntrinsics',
    'RGBDCalibration',
    'StereoCalibration',
    # Depth Provider
    'DepthProvider',
    'StereoSGBMDepthProvider',
    # Input
    'InputController',
]
