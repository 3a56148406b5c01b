"""
system_config.py - 시스템 설정 관리

stereo_input 실행에 필요한 데이터셋, 캘리브레이션, 실행, 출력 설정을
통합 관리합니다.

Version: 1.0
Author: FurSys AI Team
"""

import yaml
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional
import logging

from .dataset_layout import DatasetLayout, get_preset

logger = logging.getLogger(__name__)


@dataclass
class DatasetConfig:
    """데이터셋 설정"""
    root_dir: str = ""
    preset: str = "kitti-odometry"

    # 프리셋 필드 덮어쓰기 (예: {'depth_folder': ''})
    overrides: Dict[str, Any] = field(default_factory=dict)

    def to_layout(self) -> DatasetLayout:
        """프리셋 + 덮어쓰기로 레이아웃 생성"""
        layout = get_preset(self.preset)
        if not self.overrides:
            return layout
        merged = layout.to_dict()
        merged.update(self.overrides)
        return DatasetLayout.from_dict(merged)


@dataclass
class CalibrationConfig:
    """캘리브레이션 설정 (KITTI odometry 기본값)"""
    # 컬러 카메라
    fx: float = 707.0912
    fy: float = 707.0912
    cx: float = 601.8873
    cy: float = 183.1104
    width: int = 1242
    height: int = 375

    # 깊이 맵 크기 (None이면 컬러와 동일)
    depth_width: Optional[int] = None
    depth_height: Optional[int] = None

    # 스테레오 기준선 (m)
    baseline_m: float = 0.537

    def to_dict(self) -> Dict[str, Any]:
        """RGBDCalibration.from_dict 형식"""
        rgb = {
            'fx': self.fx,
            'fy': self.fy,
            'cx': self.cx,
            'cy': self.cy,
            'width': self.width,
            'height': self.height
        }
        depth = dict(rgb)
        if self.depth_width is not None:
            depth['width'] = self.depth_width
        if self.depth_height is not None:
            depth['height'] = self.depth_height
        return {'intrinsics_rgb': rgb, 'intrinsics_d': depth}

    def to_stereo_dict(self) -> Dict[str, float]:
        """StereoCalibration.from_dict 형식"""
        return {'baseline_m': self.baseline_m, 'focal_length_px': self.fx}


@dataclass
class RunConfig:
    """실행 설정"""
    frame_offset: int = 0
    max_frames: Optional[int] = None

    # 깊이가 사전 계산되지 않았을 때 사용할 제공자 ("sgbm" 또는 "none")
    depth_provider: str = "sgbm"
    num_disparities: int = 128
    block_size: int = 5


@dataclass
class OutputConfig:
    """출력 설정"""
    visualize: bool = False

    # 로깅
    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "stereo_input.log"


@dataclass
class SystemConfig:
    """stereo_input 전체 설정"""
    dataset: DatasetConfig = field(default_factory=DatasetConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    run: RunConfig = field(default_factory=RunConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dataset': asdict(self.dataset),
            'calibration': asdict(self.calibration),
            'run': asdict(self.run),
            'output': asdict(self.output)
        }

    def save(self, filepath: str):
        """설정을 YAML 파일로 저장"""
        with open(filepath, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

        logger.info(f"Config saved to {filepath}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SystemConfig':
        """딕셔너리에서 설정 생성"""
        return cls(
            dataset=DatasetConfig(**d.get('dataset', {})),
            calibration=CalibrationConfig(**d.get('calibration', {})),
            run=RunConfig(**d.get('run', {})),
            output=OutputConfig(**d.get('output', {}))
        )


def load_config(filepath: str) -> SystemConfig:
    """
    YAML 파일에서 설정 로드

    Args:
        filepath: 설정 파일 경로

    Returns:
        SystemConfig: 로드된 설정
    """
    path = Path(filepath)

    if not path.exists():
        logger.warning(f"Config file not found: {filepath}, using defaults")
        return SystemConfig()

    with open(path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if config_dict is None:
        return SystemConfig()

    return SystemConfig.from_dict(config_dict)


def create_default_config(save_path: Optional[str] = None) -> SystemConfig:
    """
    기본 설정 생성

    Args:
        save_path: 저장 경로 (None이면 저장 안함)

    Returns:
        SystemConfig: 기본 설정
    """
    config = SystemConfig()

    if save_path:
        config.save(save_path)

    return config
