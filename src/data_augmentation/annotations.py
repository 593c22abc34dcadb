"""
Annotation files and input image discovery.

Annotation files use the opencv_createsamples layout, one image per line::

    path/to/img.png 2 10 10 40 40 60 5 20 30

i.e. image path, rectangle count, then x y width height per rectangle,
separated by single spaces.
"""

import logging
from pathlib import Path
from typing import Optional

from .errors import AnnotationError
from .rects import Rect

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset(
    ext
    for e in (".jpg", ".jpeg", ".bmp", ".png", ".dib", ".pbm", ".pgm", ".ppm", ".sr", ".ras")
    for ext in (e, e.upper())
)


def has_image_extension(filename: Path | str) -> bool:
    return Path(filename).suffix in IMAGE_EXTENSIONS


def read_image_files_in_directory(img_dir: Path | str) -> list[Path]:
    """Image files directly inside ``img_dir``, sorted by name."""
    img_dir = Path(img_dir)
    if not img_dir.is_dir():
        raise AnnotationError(f"{img_dir} is not a directory")
    return sorted(p for p in img_dir.iterdir() if p.is_file() and has_image_extension(p))


def _parse_line(tokens: list[str]) -> list[Rect]:
    num_tokens = len(tokens)
    obj_num = int(tokens[1])
    rects = []
    i = 0
    while i < obj_num and 4 * i + 6 <= num_tokens:
        j = 4 * i + 2
        x, y, w, h = (int(t) for t in tokens[j : j + 4])
        rects.append(Rect(x, y, w, h))
        i += 1
    return rects


def load_annotation_file(gt_file: Path | str) -> tuple[list[Path], list[list[Rect]]]:
    """
    Read image paths and their labeled rectangles.

    Blank lines, lines with fewer than two tokens and lines whose path
    contains ``#`` are skipped. Lines with unparsable numbers are logged and
    skipped.

    Returns:
        (image paths, rectangle list per image), both the same length

    Raises:
        AnnotationError: the file cannot be read
    """
    gt_file = Path(gt_file)
    try:
        text = gt_file.read_text()
    except OSError as ex:
        raise AnnotationError(f"cannot read annotation file {gt_file}: {ex}") from ex

    img_paths = []
    rect_lists = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens = line.split(" ")
        if len(tokens) < 2:
            continue
        filename = tokens[0]
        if not filename or "#" in filename:
            continue
        try:
            rects = _parse_line(tokens)
        except ValueError:
            logger.warning(f"{gt_file}:{lineno}: malformed annotation line, skipping: {line!r}")
            continue
        img_paths.append(Path(filename))
        rect_lists.append(rects)
    return img_paths, rect_lists


def format_annotation_line(img_file: Path | str, rects: list[Rect], sep: str = " ") -> str:
    parts = [str(img_file), str(len(rects))]
    for rect in rects:
        parts.extend(str(v) for v in rect.as_tuple())
    return sep.join(parts)


def add_annotation_line(
    anno_file: Path | str,
    img_file: Path | str,
    rects: list[Rect],
    sep: str = " ",
):
    """Append one image's rectangles to an annotation file."""
    with open(anno_file, "a") as f:
        f.write(format_annotation_line(img_file, rects, sep) + "\n")


def resolve_inputs(input_name: Path | str) -> tuple[list[Path], Optional[list[list[Rect]]]]:
    """
    Turn the input argument into image paths and optional rectangles.

    A directory yields its image files, an image file yields itself, and
    anything else is read as an annotation file. Rectangles are only
    returned for annotation files.
    """
    input_name = Path(input_name)
    if input_name.is_dir():
        return read_image_files_in_directory(input_name), None
    if has_image_extension(input_name):
        return [input_name], None
    return load_annotation_file(input_name)
