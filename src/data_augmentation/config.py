"""
Augmentation run configuration.

Config files are plain ``key = value`` lines with ``#`` comments::

    generate_num = 10
    yaw_sigma = 5
    blur_max_sigma = 1.5
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path

from dotenv import dotenv_values

from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AugmentationConfig:
    """Sigmas and ratios for one augmentation run."""
    generate_num: int = 0  # variants per labeled region
    yaw_sigma: float = 0.0  # degrees
    pitch_sigma: float = 0.0  # degrees
    roll_sigma: float = 0.0  # degrees
    blur_max_sigma: float = 0.0  # pixels
    noise_max_sigma: float = 0.0  # pixel value
    x_slide_sigma: float = 0.0  # ratio of width
    y_slide_sigma: float = 0.0  # ratio of height
    aspect_ratio_sigma: float = 0.0
    # parsed and validated but not applied to generated images
    horizontal_flip: float = 0.0
    vertical_flip: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ConfigError(f"{f.name} must NOT be negative, got {getattr(self, f.name)}")
        if self.horizontal_flip > 1:
            raise ConfigError('"horizontal_flip" must be between 0 and 1')
        if self.vertical_flip > 1:
            raise ConfigError('"vertical_flip" must be between 0 and 1')


_REQUIRED = ("generate_num",)


def _convert(key: str, raw, kind):
    if raw is None:
        raise ConfigError(f"{key} has no value")
    try:
        return kind(raw)
    except ValueError as ex:
        raise ConfigError(f"{key}: cannot parse {raw!r} as {kind.__name__}") from ex


def load_config(conf_file: Path | str) -> AugmentationConfig:
    """
    Read an AugmentationConfig from a ``key = value`` file.

    Raises:
        ConfigError: file missing, unknown key, bad value or missing generate_num
    """
    conf_file = Path(conf_file)
    if not conf_file.is_file():
        raise ConfigError(f'Fail to open config file "{conf_file}".')

    values = dotenv_values(conf_file)
    known = {f.name: f.type for f in fields(AugmentationConfig)}

    unknown = sorted(set(values) - set(known))
    if unknown:
        raise ConfigError(f"unknown config keys in {conf_file}: {', '.join(unknown)}")
    for key in _REQUIRED:
        if key not in values:
            raise ConfigError(f"{key} is required in {conf_file}")

    kwargs = {}
    for key, raw in values.items():
        kind = int if known[key] is int else float
        kwargs[key] = _convert(key, raw, kind)

    config = AugmentationConfig(**kwargs)
    logger.info(f"loaded config from {conf_file}: {config}")
    return config
