"""
Where generated variants go: an image file plus one annotation line each.
"""

import logging
from pathlib import Path

import cv2
import numpy as np

from .annotations import add_annotation_line
from .errors import WriteFailureError
from .rects import Rect

logger = logging.getLogger(__name__)


class AnnotatedImageWriter:
    """
    Writes images into a folder and appends a full-frame label for each to
    an annotation file.
    """

    def __init__(self, output_folder: Path | str, annotation_file: Path | str, sep: str = " "):
        self.output_folder = Path(output_folder)
        self.output_folder.mkdir(parents=True, exist_ok=True)
        self.annotation_file = Path(annotation_file)
        self.sep = sep

    def write(self, name: str, img: np.ndarray) -> Path:
        """
        Save ``img`` as ``output_folder/name`` and record it.

        Raises:
            WriteFailureError: encoding or writing failed
        """
        dst_file = self.output_folder / name
        try:
            ok = cv2.imwrite(str(dst_file), img)
        except cv2.error as ex:
            raise WriteFailureError(f"cannot encode {dst_file}: {ex}") from ex
        if not ok:
            raise WriteFailureError(f"cannot write {dst_file}")

        try:
            add_annotation_line(
                self.annotation_file, dst_file, [Rect.full_frame(img)], self.sep
            )
        except OSError as ex:
            raise WriteFailureError(f"cannot append to {self.annotation_file}: {ex}") from ex
        return dst_file
