"""
dataset_layout.py - 데이터셋 레이아웃 기술자

데이터셋 규약(폴더 이름, 파일명 패턴, 깊이 해석 방식 등)을
하나의 설정 값으로 기술합니다. 새로운 데이터셋 규약은 코드 수정 없이
레이아웃 값만 추가하면 됩니다.

디렉토리 구조:
    <root>/<modality_folder>/<fname_format % frame_idx>

Version: 1.0
Author: FurSys AI Team
"""

from dataclasses import dataclass, asdict, fields, replace as dc_replace
from typing import Dict, Any, List, Callable
import logging

logger = logging.getLogger(__name__)


def format_frame_name(fname_format: str, frame_idx: int) -> str:
    """
    printf 스타일 패턴에 프레임 인덱스를 적용

    Args:
        fname_format: 파일명 패턴 (예: "%06d.png")
        frame_idx: 0 이상의 프레임 인덱스

    Returns:
        파일 이름 (예: "000042.png")
    """
    if frame_idx < 0:
        raise ValueError(f"Frame index must be non-negative, got {frame_idx}")

    try:
        return fname_format % (frame_idx,)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid frame name pattern '{fname_format}': {e}") from e


@dataclass(frozen=True)
class DatasetLayout:
    """
    데이터셋 규약 기술자

    생성 시 검증을 수행하지 않습니다. 비어 있는 필수 필드는
    이후 프레임 읽기 실패로 드러나며, 사전 검출이 필요하면
    validate()를 호출합니다.

    불변 값입니다. 변형이 필요하면 replace()로 새 레이아웃을 만듭니다.
    """
    dataset_name: str = ""

    # 스테레오 이미지 (필수)
    left_gray_folder: str = ""
    right_gray_folder: str = ""
    left_color_folder: str = ""
    right_color_folder: str = ""
    fname_format: str = ""
    itm_calibration_fname: str = ""

    # 사전 계산된 깊이 (선택)
    depth_folder: str = ""
    depth_fname_format: str = ""
    # True: 미터 단위 깊이, False: 픽셀 단위 시차(disparity)
    read_depth: bool = False

    # 세그멘테이션 파일은 왼쪽 컬러 프레임 이름을 따름
    segmentation_folder: str = ""

    # True: OxTS 덤프 폴더, False: 단일 ground-truth 포즈 파일
    odometry_oxts: bool = False
    odometry_fname: str = ""

    # 평가용 LIDAR
    velodyne_folder: str = ""
    velodyne_fname_format: str = ""

    @property
    def has_precomputed_depth(self) -> bool:
        """깊이를 디스크에서 직접 읽는지 여부"""
        return bool(self.depth_folder)

    @classmethod
    def kitti_odometry(cls) -> 'DatasetLayout':
        """KITTI odometry 규약 (사전 계산된 미터 단위 깊이)"""
        return cls(
            dataset_name="kitti-odometry",
            left_gray_folder="image_0",
            right_gray_folder="image_1",
            left_color_folder="image_2",
            right_color_folder="image_3",
            fname_format="%06d.png",
            itm_calibration_fname="itm-calib.txt",
            depth_folder="precomputed-depth/Frames",
            depth_fname_format="%04d.pgm",
            read_depth=True,
            segmentation_folder="seg_image_2/mnc",
            odometry_oxts=False,
            odometry_fname="ground-truth-poses.txt",
            velodyne_folder="velodyne",
            velodyne_fname_format="%06d.bin",
        )

    @classmethod
    def kitti_odometry_dispnet(cls) -> 'DatasetLayout':
        """KITTI odometry + DispNet 시차 맵 (PFM)"""
        return cls.kitti_odometry().replace(
            depth_folder="precomputed-depth-dispnet",
            depth_fname_format="%06d.pfm",
            read_depth=False,
        )

    def replace(self, **overrides) -> 'DatasetLayout':
        """일부 필드만 바꾼 새 레이아웃"""
        return dc_replace(self, **overrides)

    def validate(self) -> List[str]:
        """
        설정 오류 목록 반환 (비어 있으면 정상)

        필수 폴더/패턴 누락, 한쪽만 설정된 선택 폴더/패턴 쌍,
        정수 하나를 받지 않는 패턴을 검사합니다.
        """
        problems = []

        required = (
            'left_gray_folder', 'right_gray_folder',
            'left_color_folder', 'right_color_folder', 'fname_format',
        )
        for name in required:
            if not getattr(self, name):
                problems.append(f"'{name}' is empty")

        pairs = (
            ('depth_folder', 'depth_fname_format'),
            ('velodyne_folder', 'velodyne_fname_format'),
        )
        for folder_name, format_name in pairs:
            if bool(getattr(self, folder_name)) != bool(getattr(self, format_name)):
                problems.append(
                    f"'{folder_name}' and '{format_name}' must be both set or both empty"
                )

        for name in ('fname_format', 'depth_fname_format', 'velodyne_fname_format'):
            pattern = getattr(self, name)
            if not pattern:
                continue
            try:
                format_frame_name(pattern, 0)
            except ValueError as e:
                problems.append(str(e))

        return problems

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'DatasetLayout':
        """딕셔너리에서 레이아웃 생성"""
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown dataset layout fields: {sorted(unknown)}")
        return cls(**d)


PRESETS: Dict[str, Callable[[], DatasetLayout]] = {
    'kitti-odometry': DatasetLayout.kitti_odometry,
    'kitti-odometry-dispnet': DatasetLayout.kitti_odometry_dispnet,
}


def get_preset(name: str) -> DatasetLayout:
    """
    이름으로 프리셋 레이아웃 조회

    Args:
        name: 프리셋 이름

    Returns:
        DatasetLayout: 새로 생성된 레이아웃 값
    """
    if name not in PRESETS:
        raise KeyError(f"Unknown dataset preset '{name}', available: {sorted(PRESETS)}")
    return PRESETS[name]()


def kitti_odometry_config() -> DatasetLayout:
    return DatasetLayout.kitti_odometry()


def kitti_odometry_dispnet_config() -> DatasetLayout:
    return DatasetLayout.kitti_odometry_dispnet()
