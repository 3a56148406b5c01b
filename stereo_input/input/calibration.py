"""
calibration.py - 카메라 캘리브레이션 값

컬러/깊이 센서 내부 파라미터와 정류된 스테레오 기하를 담습니다.
입력 계층은 이미지 크기만 사용하며(버퍼 크기 결정),
스테레오 캘리브레이션은 깊이 제공자에게 그대로 전달합니다.

Version: 1.0
Author: FurSys AI Team
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Tuple


@dataclass(frozen=True)
class CameraIntrinsics:
    """카메라 내부 파라미터"""
    fx: float
    fy: float
    cx: float
    cy: float
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return int(self.width), int(self.height)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'CameraIntrinsics':
        return cls(
            fx=float(d['fx']),
            fy=float(d['fy']),
            cx=float(d['cx']),
            cy=float(d['cy']),
            width=int(d['width']),
            height=int(d['height'])
        )


@dataclass(frozen=True)
class RGBDCalibration:
    """
    RGB-D 캘리브레이션

    Attributes:
        intrinsics_rgb: 컬러(및 그레이스케일) 카메라
        intrinsics_d: 깊이 맵
    """
    intrinsics_rgb: CameraIntrinsics
    intrinsics_d: CameraIntrinsics

    @property
    def rgb_size(self) -> Tuple[int, int]:
        return self.intrinsics_rgb.size

    @property
    def depth_size(self) -> Tuple[int, int]:
        return self.intrinsics_d.size

    def to_dict(self) -> Dict[str, Any]:
        return {
            'intrinsics_rgb': self.intrinsics_rgb.to_dict(),
            'intrinsics_d': self.intrinsics_d.to_dict()
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'RGBDCalibration':
        """
        딕셔너리에서 생성

        'intrinsics_d'가 없으면 깊이 맵이 컬러 이미지와
        정합되어 있다고 보고 컬러 파라미터를 사용합니다.
        """
        rgb = CameraIntrinsics.from_dict(d['intrinsics_rgb'])
        depth = CameraIntrinsics.from_dict(d['intrinsics_d']) if 'intrinsics_d' in d else rgb
        return cls(intrinsics_rgb=rgb, intrinsics_d=depth)


@dataclass(frozen=True)
class StereoCalibration:
    """정류된 스테레오 기하 (기준선 + 초점거리)"""
    baseline_m: float
    focal_length_px: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'StereoCalibration':
        return cls(
            baseline_m=float(d['baseline_m']),
            focal_length_px=float(d['focal_length_px'])
        )
