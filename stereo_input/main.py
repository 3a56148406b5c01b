"""
main.py - stereo_input 시퀀스 실행기

입력 컨트롤러를 폴링-읽기 루프로 구동하는 파이프라인 드라이버입니다.

파이프라인:
1. has_more_images()로 다음 프레임 파일 존재 확인
2. read_next_frame()으로 버퍼 갱신 및 커서 전진
3. 사전 계산된 깊이가 없으면 깊이 제공자로 깊이 버퍼 채움
4. 프레임 콜백 호출 (융합/추적/세그멘테이션 단계)

읽기 실패는 재시도하지 않습니다. 데이터셋 파일 누락은 일시적 현상이 아닙니다.

Version: 1.0
Author: FurSys AI Team
"""

import argparse
import time
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Callable, Dict, Any

import cv2
import numpy as np

from .config.dataset_layout import PRESETS
from .config.system_config import SystemConfig, RunConfig, OutputConfig, load_config
from .input.calibration import RGBDCalibration, StereoCalibration
from .input.depth_provider import DepthProvider, StereoSGBMDepthProvider
from .input.input_controller import InputController

logger = logging.getLogger(__name__)

# (프레임 인덱스, 컨트롤러) → False를 반환하면 중단
FrameCallback = Callable[[int, InputController], Optional[bool]]


class StopReason(Enum):
    """시퀀스 종료 사유"""
    END_OF_SEQUENCE = "end_of_sequence"  # 다음 프레임 파일 없음
    READ_FAILED = "read_failed"          # 파일은 있으나 디코딩 실패
    MAX_FRAMES = "max_frames"
    STOPPED = "stopped"                  # 콜백 요청


@dataclass
class RunSummary:
    """시퀀스 실행 요약"""
    dataset_identifier: str
    frames_read: int
    first_frame: Optional[int]
    last_frame: Optional[int]
    stop_reason: StopReason
    elapsed_s: float

    @property
    def fps(self) -> float:
        if self.elapsed_s <= 0:
            return 0.0
        return self.frames_read / self.elapsed_s

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            'dataset_identifier': self.dataset_identifier,
            'frames_read': self.frames_read,
            'first_frame': self.first_frame,
            'last_frame': self.last_frame,
            'stop_reason': self.stop_reason.value,
            'elapsed_s': self.elapsed_s,
            'fps': self.fps
        }


class SequenceRunner:
    """
    입력 컨트롤러 구동기

    Example:
        >>> runner = SequenceRunner(controller, max_frames=100)
        >>> summary = runner.run(lambda idx, ctrl: process(*ctrl.get_cv_images()))
        >>> print(summary.stop_reason)
    """

    def __init__(self, controller: InputController, max_frames: Optional[int] = None):
        """
        Args:
            controller: 입력 컨트롤러
            max_frames: 최대 처리 프레임 수 (None이면 시퀀스 끝까지)
        """
        self.controller = controller
        self.max_frames = max_frames

    def run(self, on_frame: Optional[FrameCallback] = None) -> RunSummary:
        """
        시퀀스 실행

        Args:
            on_frame: 프레임마다 호출되는 콜백

        Returns:
            RunSummary: 실행 요약
        """
        controller = self.controller
        layout = controller.get_config()

        for problem in layout.validate():
            logger.warning(f"Dataset layout problem: {problem}")

        frames_read = 0
        first_frame = None
        last_frame = None
        start = time.time()

        while True:
            if self.max_frames is not None and frames_read >= self.max_frames:
                stop_reason = StopReason.MAX_FRAMES
                break

            if not controller.has_more_images():
                stop_reason = StopReason.END_OF_SEQUENCE
                logger.info(f"No more images at frame {controller.get_current_frame()}")
                break

            frame_idx = controller.get_current_frame()
            if not controller.read_next_frame():
                stop_reason = StopReason.READ_FAILED
                logger.error(f"Failed to read frame {frame_idx}, stopping")
                break

            if not layout.has_precomputed_depth:
                self._compute_depth()

            frames_read += 1
            if first_frame is None:
                first_frame = frame_idx
            last_frame = frame_idx

            if on_frame is not None and on_frame(frame_idx, controller) is False:
                stop_reason = StopReason.STOPPED
                break

        summary = RunSummary(
            dataset_identifier=controller.get_dataset_identifier(),
            frames_read=frames_read,
            first_frame=first_frame,
            last_frame=last_frame,
            stop_reason=stop_reason,
            elapsed_s=time.time() - start
        )
        logger.info(
            f"{summary.dataset_identifier}: {summary.frames_read} frames, "
            f"stop={summary.stop_reason.value}, {summary.fps:.1f} fps"
        )
        return summary

    def _compute_depth(self):
        """깊이 제공자로 현재 프레임의 깊이 버퍼 채움"""
        provider = self.controller.get_depth_provider()
        if provider is None:
            return

        left, right = self.controller.get_cv_stereo_gray()
        _, depth = self.controller.get_cv_images()
        provider.compute_depth(left, right, self.controller.get_stereo_calibration(), depth)


def build_depth_provider(run_config: RunConfig) -> Optional[DepthProvider]:
    """설정에 따른 깊이 제공자 생성"""
    name = run_config.depth_provider.lower()

    if name == "none":
        return None
    if name == "sgbm":
        return StereoSGBMDepthProvider(
            num_disparities=run_config.num_disparities,
            block_size=run_config.block_size
        )
    raise ValueError(f"Unknown depth provider: {run_config.depth_provider}")


def build_input_controller(
    config: SystemConfig,
    depth_provider: Optional[DepthProvider] = None,
    dataset_dir: Optional[str] = None
) -> InputController:
    """
    설정으로부터 입력 컨트롤러 생성

    Args:
        config: 시스템 설정
        depth_provider: 깊이 제공자 (호출자 소유)
        dataset_dir: 데이터셋 루트 (None이면 config.dataset.root_dir)

    Returns:
        InputController
    """
    root_dir = dataset_dir or config.dataset.root_dir
    if not root_dir:
        raise ValueError("Dataset root directory is not configured")

    if not Path(root_dir).is_dir():
        logger.warning(f"Dataset directory not found: {root_dir}")

    return InputController(
        dataset_folder=root_dir,
        config=config.dataset.to_layout(),
        depth_provider=depth_provider,
        calibration=RGBDCalibration.from_dict(config.calibration.to_dict()),
        stereo_calibration=StereoCalibration.from_dict(config.calibration.to_stereo_dict()),
        frame_offset=config.run.frame_offset
    )


def setup_logging(output_config: OutputConfig):
    """로깅 설정"""
    handlers = [logging.StreamHandler()]
    if output_config.log_to_file:
        handlers.append(logging.FileHandler(output_config.log_file))

    logging.basicConfig(
        level=getattr(logging, output_config.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def main():
    """메인 실행"""
    parser = argparse.ArgumentParser(
        description='stereo_input: 스테레오 SLAM 데이터셋 시퀀스 재생'
    )
    parser.add_argument('--dataset-dir', type=str, default=None,
                        help='시퀀스 루트 디렉토리')
    parser.add_argument('--config', type=str, default=None,
                        help='설정 파일 경로 (YAML)')
    parser.add_argument('--preset', type=str, default=None, choices=sorted(PRESETS),
                        help='데이터셋 레이아웃 프리셋')
    parser.add_argument('--frame-offset', type=int, default=None,
                        help='시작 프레임 인덱스')
    parser.add_argument('--max-frames', type=int, default=None,
                        help='최대 처리 프레임 수')
    parser.add_argument('--visualize', action='store_true',
                        help='프레임 시각화')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='상세 로그 출력')

    args = parser.parse_args()

    # 설정 로드
    if args.config:
        config = load_config(args.config)
    else:
        config = SystemConfig()

    if args.preset:
        config.dataset.preset = args.preset
    if args.frame_offset is not None:
        config.run.frame_offset = args.frame_offset
    if args.max_frames is not None:
        config.run.max_frames = args.max_frames
    if args.visualize:
        config.output.visualize = True
    if args.verbose:
        config.output.log_level = "DEBUG"

    setup_logging(config.output)

    depth_provider = build_depth_provider(config.run)
    controller = build_input_controller(config, depth_provider, dataset_dir=args.dataset_dir)

    def on_frame(frame_idx: int, ctrl: InputController) -> bool:
        rgb, depth = ctrl.get_cv_images()

        if frame_idx % 50 == 0:
            logger.info(f"Frame {frame_idx}: valid depth={np.count_nonzero(depth) / depth.size:.1%}")

        if not config.output.visualize:
            return True

        depth_vis = cv2.applyColorMap(
            cv2.convertScaleAbs(depth, alpha=255.0 / max(int(depth.max()), 1)),
            cv2.COLORMAP_JET
        )
        if depth_vis.shape[:2] != rgb.shape[:2]:
            depth_vis = cv2.resize(depth_vis, (rgb.shape[1], rgb.shape[0]))

        cv2.imshow('stereo_input', np.vstack([rgb, depth_vis]))
        return not (cv2.waitKey(1) & 0xFF == ord('q'))

    runner = SequenceRunner(controller, max_frames=config.run.max_frames)
    summary = runner.run(on_frame)

    if config.output.visualize:
        cv2.destroyAllWindows()

    # 요약 출력
    print(f"\n{summary.dataset_identifier}")
    print(f"  Frames read: {summary.frames_read}")
    print(f"  Range: {summary.first_frame} - {summary.last_frame}")
    print(f"  Stop reason: {summary.stop_reason.value}")
    print(f"  Throughput: {summary.fps:.1f} fps")


if __name__ == "__main__":
    main()
