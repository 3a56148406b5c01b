"""
input_controller.py - 스테레오 입력 컨트롤러

데이터셋 루트와 레이아웃 기술자로부터 프레임 단위의
스테레오 컬러/그레이스케일 및 깊이 데이터를 순차적으로 로드합니다.

주요 기능:
1. 경로 해석: <root>/<folder>/<pattern % frame_idx> 단일 규칙
2. 순차 읽기: 프레임 커서를 1씩 전진 (전부 성공 또는 전부 실패)
3. 버퍼 재사용: 생성 시 캘리브레이션 크기로 한 번만 할당
4. 임의 접근: 컨트롤러 상태를 건드리지 않고 호출자 버퍼에 로드

사용 흐름:
    has_more_images() → read_next_frame() → get_cv_images() / get_cv_stereo_gray()

Version: 1.0
Author: FurSys AI Team
"""

from pathlib import Path
from typing import Optional, Tuple, List, Dict, Union
import logging

import cv2
import numpy as np

from ..config.dataset_layout import DatasetLayout, format_frame_name
from .calibration import RGBDCalibration, StereoCalibration
from .depth_provider import DepthProvider

logger = logging.getLogger(__name__)

INT16_MIN = np.iinfo(np.int16).min
INT16_MAX = np.iinfo(np.int16).max

# 매 프레임 로드하는 모달리티 (깊이는 depth_folder가 설정된 경우만)
ACTIVE_MODALITIES = ('left_gray', 'right_gray', 'left_color', 'right_color', 'depth')


def to_int16_depth(raw: np.ndarray) -> np.ndarray:
    """
    디코딩된 깊이/시차 이미지를 int16으로 변환

    uint16 PGM/PNG, float PFM 등 형식에 관계없이
    반올림 후 int16 범위로 포화시킵니다. NaN은 0이 됩니다.

    float 값은 정수 단위로 양자화됩니다. DispNet PFM 시차(픽셀)는
    정수 픽셀로 반올림되며 (12.75 → 13) 소수 시차는 보존되지 않습니다.
    원본 정밀도가 필요하면 get_frame_path() 경로의 파일을 직접 읽습니다.
    """
    if raw.dtype == np.int16:
        return raw

    if np.issubdtype(raw.dtype, np.floating):
        raw = np.rint(np.nan_to_num(raw, nan=0.0, posinf=INT16_MAX, neginf=INT16_MIN))
    else:
        raw = raw.astype(np.int64)

    return np.clip(raw, INT16_MIN, INT16_MAX).astype(np.int16)


class InputController:
    """
    프레임 인덱스 기반 스테레오 입력 컨트롤러

    단일 스레드 전용입니다. get_cv_images()/get_cv_stereo_gray()가 반환하는
    배열은 컨트롤러 버퍼 자체이므로 다음 read_next_frame() 호출 전까지만 유효합니다.
    get_frame_cv_images()는 컨트롤러 상태를 변경하지 않으므로
    다른 스레드에서 동시에 호출해도 됩니다.

    Example:
        >>> controller = InputController(
        ...     "/data/kitti/sequences/06",
        ...     DatasetLayout.kitti_odometry(),
        ...     depth_provider=None,
        ...     calibration=calib,
        ...     stereo_calibration=stereo_calib
        ... )
        >>> while controller.has_more_images() and controller.read_next_frame():
        ...     rgb, depth = controller.get_cv_images()
    """

    def __init__(
        self,
        dataset_folder: Union[str, Path],
        config: DatasetLayout,
        depth_provider: Optional[DepthProvider],
        calibration: RGBDCalibration,
        stereo_calibration: StereoCalibration,
        frame_offset: int = 0
    ):
        """
        Args:
            dataset_folder: 시퀀스 루트 디렉토리
            config: 데이터셋 레이아웃
            depth_provider: 깊이 제공자 (소유하지 않음, None 허용)
            calibration: RGB-D 캘리브레이션 (버퍼 크기 결정)
            stereo_calibration: 스테레오 캘리브레이션 (깊이 제공자에 전달)
            frame_offset: 시작 프레임 인덱스
        """
        if frame_offset < 0:
            raise ValueError(f"frame_offset must be non-negative, got {frame_offset}")

        self._root = Path(dataset_folder)
        self._config = config
        self._depth_provider = depth_provider
        self._frame_idx = frame_offset
        self._calibration = calibration
        self._stereo_calibration = stereo_calibration

        rgb_w, rgb_h = calibration.rgb_size
        depth_w, depth_h = calibration.depth_size

        # 생성 이후 크기가 바뀌지 않는 재사용 버퍼
        self._left_color_buf = np.zeros((rgb_h, rgb_w, 3), dtype=np.uint8)
        self._right_color_buf = np.zeros((rgb_h, rgb_w, 3), dtype=np.uint8)
        self._left_gray_buf = np.zeros((rgb_h, rgb_w), dtype=np.uint8)
        self._right_gray_buf = np.zeros((rgb_h, rgb_w), dtype=np.uint8)
        self._depth_buf = np.zeros((depth_h, depth_w), dtype=np.int16)

        logger.info(
            f"InputController: dataset={self.get_dataset_identifier()}, "
            f"offset={frame_offset}, rgb={rgb_w}x{rgb_h}, depth={depth_w}x{depth_h}, "
            f"precomputed_depth={config.has_precomputed_depth}"
        )

    # ------------------------------------------------------------------
    # 경로 해석
    # ------------------------------------------------------------------

    def get_frame_path(self, folder: str, fname_format: str, frame_idx: int) -> Path:
        """모든 모달리티에 공통으로 쓰이는 경로 규칙"""
        return self._root / folder / format_frame_name(fname_format, frame_idx)

    def _frame_sources(
        self,
        frame_idx: int,
        modalities: Tuple[str, ...]
    ) -> List[Tuple[str, Path, int]]:
        """(모달리티, 경로, imread 플래그) 목록"""
        c = self._config
        table = {
            'left_gray': (c.left_gray_folder, c.fname_format, cv2.IMREAD_GRAYSCALE),
            'right_gray': (c.right_gray_folder, c.fname_format, cv2.IMREAD_GRAYSCALE),
            'left_color': (c.left_color_folder, c.fname_format, cv2.IMREAD_COLOR),
            'right_color': (c.right_color_folder, c.fname_format, cv2.IMREAD_COLOR),
            'depth': (c.depth_folder, c.depth_fname_format, cv2.IMREAD_UNCHANGED),
        }

        sources = []
        for name in modalities:
            # 깊이 폴더가 비어 있으면 깊이 파일은 절대 접근하지 않음
            if name == 'depth' and not c.has_precomputed_depth:
                continue
            folder, fname_format, flag = table[name]
            sources.append((name, self.get_frame_path(folder, fname_format, frame_idx), flag))
        return sources

    def _expected_shapes(self) -> Dict[str, Tuple[int, ...]]:
        return {
            'left_gray': self._left_gray_buf.shape,
            'right_gray': self._right_gray_buf.shape,
            'left_color': self._left_color_buf.shape,
            'right_color': self._right_color_buf.shape,
            'depth': self._depth_buf.shape,
        }

    def _load_modalities(
        self,
        frame_idx: int,
        modalities: Tuple[str, ...]
    ) -> Optional[Dict[str, np.ndarray]]:
        """
        지정된 모달리티를 임시 배열로 디코딩

        Returns:
            모달리티 → 배열, 하나라도 실패하면 None
        """
        try:
            sources = self._frame_sources(frame_idx, modalities)
        except ValueError as e:
            logger.warning(f"Cannot resolve frame {frame_idx}: {e}")
            return None

        expected = self._expected_shapes()
        images = {}

        for name, path, flag in sources:
            image = cv2.imread(str(path), flag)
            if image is None:
                logger.warning(f"Failed to load {name} for frame {frame_idx}: {path}")
                return None

            if name == 'depth':
                if image.ndim != 2:
                    logger.warning(f"Depth image is not single-channel: {path}")
                    return None
                image = to_int16_depth(image)

            if image.shape != expected[name]:
                logger.warning(
                    f"Unexpected {name} size {image.shape} for frame {frame_idx}, "
                    f"expected {expected[name]}: {path}"
                )
                return None

            images[name] = image

        return images

    # ------------------------------------------------------------------
    # 순차 읽기
    # ------------------------------------------------------------------

    def has_more_images(self) -> bool:
        """현재 프레임의 모든 활성 모달리티 파일이 존재하는지 확인"""
        try:
            sources = self._frame_sources(self._frame_idx, ACTIVE_MODALITIES)
        except ValueError as e:
            logger.warning(f"Cannot resolve frame {self._frame_idx}: {e}")
            return False

        return all(path.is_file() for _, path, _ in sources)

    def read_next_frame(self) -> bool:
        """
        다음 프레임으로 전진

        모든 활성 모달리티를 먼저 임시 배열로 디코딩한 뒤,
        전부 성공한 경우에만 버퍼를 덮어쓰고 커서를 증가시킵니다.

        Returns:
            True이면 버퍼가 (커서 - 1) 프레임을 담고 있음
        """
        images = self._load_modalities(self._frame_idx, ACTIVE_MODALITIES)
        if images is None:
            return False

        np.copyto(self._left_gray_buf, images['left_gray'])
        np.copyto(self._right_gray_buf, images['right_gray'])
        np.copyto(self._left_color_buf, images['left_color'])
        np.copyto(self._right_color_buf, images['right_color'])
        if 'depth' in images:
            np.copyto(self._depth_buf, images['depth'])

        logger.debug(f"Read frame {self._frame_idx}")
        self._frame_idx += 1
        return True

    def get_cv_images(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        현재 프레임의 (왼쪽 컬러 BGR, 깊이) 버퍼

        깊이 버퍼는 깊이 제공자가 채울 수 있도록 쓰기 가능합니다.
        """
        return self._left_color_buf, self._depth_buf

    def get_cv_stereo_gray(self) -> Tuple[np.ndarray, np.ndarray]:
        """현재 프레임의 (왼쪽, 오른쪽) 그레이스케일 버퍼"""
        return self._left_gray_buf, self._right_gray_buf

    def get_cv_stereo_color(self) -> Tuple[np.ndarray, np.ndarray]:
        """현재 프레임의 (왼쪽, 오른쪽) 컬러 버퍼"""
        return self._left_color_buf, self._right_color_buf

    # ------------------------------------------------------------------
    # 임의 접근
    # ------------------------------------------------------------------

    def get_frame_cv_images(
        self,
        frame_idx: int,
        rgb: Optional[np.ndarray],
        depth: Optional[np.ndarray]
    ) -> bool:
        """
        임의 프레임의 컬러/깊이를 호출자 버퍼에 로드

        커서와 내부 버퍼는 변경하지 않습니다. 깊이가 사전 계산되지 않은
        레이아웃이면 depth 버퍼는 그대로 둡니다.

        Args:
            frame_idx: 대상 프레임 인덱스
            rgb: (H, W, 3) uint8 출력 버퍼 또는 None
            depth: (H, W) int16 출력 버퍼 또는 None

        Returns:
            모든 요청 모달리티를 로드했으면 True
        """
        expected = self._expected_shapes()
        for name, out, dtype in (('left_color', rgb, np.uint8), ('depth', depth, np.int16)):
            if out is not None and (out.shape != expected[name] or out.dtype != dtype):
                logger.error(
                    f"Output buffer for {name} must be {expected[name]} {np.dtype(dtype)}, "
                    f"got {out.shape} {out.dtype}"
                )
                return False

        modalities = []
        if rgb is not None:
            modalities.append('left_color')
        if depth is not None:
            modalities.append('depth')

        images = self._load_modalities(frame_idx, tuple(modalities))
        if images is None:
            return False

        if 'left_color' in images:
            np.copyto(rgb, images['left_color'])
        if 'depth' in images:
            np.copyto(depth, images['depth'])
        return True

    # ------------------------------------------------------------------
    # 보조 데이터 경로 (내용은 하위 평가 모듈이 해석)
    # ------------------------------------------------------------------

    def get_segmentation_path(self, frame_idx: int) -> Optional[Path]:
        """왼쪽 컬러 프레임 이름을 따르는 세그멘테이션 경로"""
        if not self._config.segmentation_folder:
            return None
        return self.get_frame_path(
            self._config.segmentation_folder, self._config.fname_format, frame_idx
        )

    def get_velodyne_path(self, frame_idx: int) -> Optional[Path]:
        if not self._config.velodyne_folder:
            return None
        return self.get_frame_path(
            self._config.velodyne_folder, self._config.velodyne_fname_format, frame_idx
        )

    def get_odometry_path(self) -> Optional[Path]:
        """Ground-truth 포즈 파일 (odometry_oxts이면 OxTS 폴더)"""
        if not self._config.odometry_fname:
            return None
        return self._root / self._config.odometry_fname

    def get_calibration_path(self) -> Optional[Path]:
        if not self._config.itm_calibration_fname:
            return None
        return self._root / self._config.itm_calibration_fname

    # ------------------------------------------------------------------
    # 접근자
    # ------------------------------------------------------------------

    def get_rgb_size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self._calibration.rgb_size

    def get_depth_size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self._calibration.depth_size

    def get_sequence_name(self) -> str:
        """데이터셋 루트의 마지막 경로 요소"""
        return self._root.name

    def get_dataset_identifier(self) -> str:
        return f"{self._config.dataset_name}-{self.get_sequence_name()}"

    def get_current_frame(self) -> int:
        """
        현재 프레임 인덱스

        오프셋을 사용한 경우 처리한 프레임 수와 다를 수 있습니다.
        """
        return self._frame_idx

    def get_depth_provider(self) -> Optional[DepthProvider]:
        return self._depth_provider

    def set_depth_provider(self, depth_provider: Optional[DepthProvider]):
        self._depth_provider = depth_provider

    def get_config(self) -> DatasetLayout:
        return self._config

    def get_calibration(self) -> RGBDCalibration:
        return self._calibration

    def get_stereo_calibration(self) -> StereoCalibration:
        return self._stereo_calibration
