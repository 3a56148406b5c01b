"""
config 모듈 - 설정 관리
"""

from .dataset_layout import DatasetLayout, get_preset, PRESETS
from .system_config import SystemConfig, load_config

__all__ = ['DatasetLayout', 'get_preset', 'PRESETS', 'SystemConfig', 'load_config']
