"""
input 모듈 - 데이터 입력 처리

데이터셋 디스크 레이아웃으로부터 스테레오 프레임을 로드합니다.
"""

from .calibration import CameraIntrinsics, RGBDCalibration, StereoCalibration
from .depth_provider import DepthProvider, StereoSGBMDepthProvider
from .input_controller import InputController

__all__ = [
    'CameraIntrinsics',
    'RGBDCalibration',
    'StereoCalibration',
    'DepthProvider',
    'StereoSGBMDepthProvider',
    'InputController',
]
