from __future__ import annotations

import glob
import os
from typing import List

from natsort import natsorted

from fractalimage.errors import VideoEncodeError
from fractalimage.util.logging_setup import get_logger

FRAME_EXTENSIONS = (".png", ".jpg", ".jpeg")

def collect_frames(input_dir: str) -> List[str]:
    """Image files in ``input_dir`` in natural order (frame_2 before frame_10)."""
    paths = [p for p in glob.glob(os.path.join(input_dir, "*")) if p.lower().endswith(FRAME_EXTENSIONS)]
    return natsorted(paths)

def encode_with_opencv(*, input_dir: str, output_file: str, fps: int) -> int:
    logger = get_logger()
    try:
        import cv2  # type: ignore
    except ImportError as e:
        raise VideoEncodeError(f"OpenCV not installed: {e}") from e

    frames = collect_frames(input_dir)
    if not frames:
        raise VideoEncodeError(f"No frames found in {input_dir}")

    first = cv2.imread(frames[0])
    if first is None:
        raise VideoEncodeError(f"Failed to read first frame: {frames[0]}")
    h, w, _ = first.shape

    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    out = cv2.VideoWriter(output_file, fourcc, fps, (w, h))
    if not out.isOpened():
        raise VideoEncodeError(f"Failed to open VideoWriter for {output_file}")

    logger.info("Encoding video %s from %s frames (%sx%s @ %sfps)", output_file, len(frames), w, h, fps)
    try:
        for i, path in enumerate(frames):
            img = cv2.imread(path)
            if img is None:
                raise VideoEncodeError(f"Failed to read frame: {path}")
            if img.shape[0] != h or img.shape[1] != w:
                img = cv2.resize(img, (w, h), interpolation=cv2.INTER_AREA)
            out.write(img)
            if i % 200 == 0:
                logger.info("Encoded %s/%s frames", i, len(frames))
    finally:
        out.release()
    logger.info("Video written: %s", output_file)
    return len(frames)
