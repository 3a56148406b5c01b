"""
depth_provider.py - 깊이 제공자 인터페이스

스테레오 그레이스케일 버퍼로부터 깊이 맵을 계산(또는 공급)하는
외부 협력 객체의 인터페이스입니다. 입력 컨트롤러는 제공자를 소유하지 않으며,
파이프라인 드라이버가 필요할 때 호출합니다.

Version: 1.0
Author: FurSys AI Team
"""

from abc import ABC, abstractmethod
import logging

import cv2
import numpy as np

from .calibration import StereoCalibration

logger = logging.getLogger(__name__)

INT16_MAX = np.iinfo(np.int16).max


class DepthProvider(ABC):
    """
    깊이 제공자 기본 클래스

    depth_out은 호출자가 소유한 (H, W) int16 버퍼이며,
    구현체는 이 버퍼를 제자리에서 덮어써야 합니다.
    """

    def __init__(self, depth_scale: float = 1000.0):
        """
        Args:
            depth_scale: 미터 → 정수 깊이 변환 배율 (기본: 밀리미터)
        """
        self.depth_scale = depth_scale

    @abstractmethod
    def compute_depth(
        self,
        left_gray: np.ndarray,
        right_gray: np.ndarray,
        stereo_calibration: StereoCalibration,
        depth_out: np.ndarray
    ) -> None:
        """스테레오 쌍에서 깊이 맵 계산"""

    def depth_from_disparity(
        self,
        disparity: np.ndarray,
        stereo_calibration: StereoCalibration,
        depth_out: np.ndarray
    ) -> None:
        """
        시차(픽셀) → 정수 깊이 변환

        depth = baseline * focal / disparity. 시차가 0 이하인 픽셀은 0이 되고,
        int16 범위를 넘는 값은 포화됩니다.

        Args:
            disparity: (H, W) 시차 맵
            stereo_calibration: 스테레오 캘리브레이션
            depth_out: (H, W) int16 출력 버퍼
        """
        if disparity.shape != depth_out.shape:
            raise ValueError(
                f"Disparity shape {disparity.shape} does not match depth buffer {depth_out.shape}"
            )

        disparity = disparity.astype(np.float32)
        valid = disparity > 0
        numerator = stereo_calibration.baseline_m * stereo_calibration.focal_length_px * self.depth_scale

        depth = np.zeros(disparity.shape, dtype=np.float32)
        depth[valid] = numerator / disparity[valid]
        np.copyto(depth_out, np.clip(np.rint(depth), 0, INT16_MAX).astype(np.int16))


class StereoSGBMDepthProvider(DepthProvider):
    """
    OpenCV StereoSGBM 기반 깊이 제공자

    Example:
        >>> provider = StereoSGBMDepthProvider(num_disparities=128)
        >>> provider.compute_depth(left, right, stereo_calib, depth_buf)
    """

    def __init__(
        self,
        num_disparities: int = 128,
        block_size: int = 5,
        depth_scale: float = 1000.0
    ):
        super().__init__(depth_scale=depth_scale)

        # numDisparities는 16의 배수, blockSize는 홀수
        if num_disparities % 16 != 0:
            num_disparities = (num_disparities // 16 + 1) * 16
        if block_size % 2 == 0:
            block_size += 1

        self.num_disparities = num_disparities
        self.block_size = block_size
        self._matcher = cv2.StereoSGBM_create(
            minDisparity=0,
            numDisparities=num_disparities,
            blockSize=block_size,
            P1=8 * block_size * block_size,
            P2=32 * block_size * block_size,
            disp12MaxDiff=1,
            uniquenessRatio=10,
            speckleWindowSize=100,
            speckleRange=2,
            preFilterCap=63,
            mode=cv2.STEREO_SGBM_MODE_SGBM_3WAY
        )

    def compute_depth(
        self,
        left_gray: np.ndarray,
        right_gray: np.ndarray,
        stereo_calibration: StereoCalibration,
        depth_out: np.ndarray
    ) -> None:
        # SGBM 출력은 1/16 픽셀 단위 고정소수점
        disparity = self._matcher.compute(left_gray, right_gray).astype(np.float32) / 16.0

        # 시차는 컬러 해상도 기준 그대로 두어 focal_length_px와 짝을 맞춤
        if disparity.shape != depth_out.shape:
            disparity = cv2.resize(
                disparity, (depth_out.shape[1], depth_out.shape[0]),
                interpolation=cv2.INTER_NEAREST
            )

        self.depth_from_disparity(disparity, stereo_calibration, depth_out)
        logger.debug(f"SGBM depth computed: {np.count_nonzero(depth_out)} valid pixels")
