"""
Post-processing of the per-pixel color buffer.

Converts the raw buffer produced by the render loop into a displayable
image, according to the render mode:
- Depth: distances normalized by the farthest hit, background white
- Normal: normals remapped from [-1, 1] to [0, 1], background black
- Full: extended Reinhard tone mapping followed by gamma correction
"""

from __future__ import annotations
import logging

import numpy as np

from .options import RenderOptions, RenderMode

logger = logging.getLogger(__name__)

GAMMA = 2.2


def _background_mask(buffer: np.ndarray) -> np.ndarray:
    """Pixels where no surface was hit (the tracer returns exact zeros)."""
    return np.all(buffer == 0.0, axis=-1)


def normalize_depth(buffer: np.ndarray) -> np.ndarray:
    """Scale hit distances into [0, 1]; background pixels become white."""
    background = _background_mask(buffer)
    result = np.ones_like(buffer)
    if np.all(background):
        return result

    max_depth = float(buffer[~background].max())
    result[~background] = buffer[~background] / max_depth
    return result


def pack_normal(buffer: np.ndarray) -> np.ndarray:
    """Remap normals to colors; background pixels stay black."""
    background = _background_mask(buffer)
    result = buffer * 0.5 + 0.5
    result[background] = 0.0
    return result


def reinhard_extended(buffer: np.ndarray, white_point: float) -> np.ndarray:
    """Extended Reinhard per channel: V * (1 + V / C^2) / (1 + V)."""
    if white_point <= 0:
        return np.zeros_like(buffer)
    return buffer * (1.0 + buffer / (white_point * white_point)) / (1.0 + buffer)


def apply_gamma(image: np.ndarray, gamma: float = GAMMA) -> np.ndarray:
    """Apply gamma correction to linear values."""
    return np.power(np.clip(image, 0.0, None), 1.0 / gamma)


def tone_map(buffer: np.ndarray) -> np.ndarray:
    """Tone map a linear HDR buffer using its brightest channel as white."""
    white_point = float(buffer.max()) if buffer.size else 0.0
    logger.debug("Tone mapping with white point %.4f", white_point)
    return apply_gamma(reinhard_extended(buffer, white_point))


def to_ldr(image: np.ndarray) -> np.ndarray:
    """Convert [0, 1] float image to 8-bit."""
    return np.clip(np.rint(image * 255.0), 0, 255).astype(np.uint8)


def post_process(buffer: np.ndarray, options: RenderOptions) -> np.ndarray:
    """Turn the raw color buffer into the final 8-bit image.

    Args:
        buffer: Per-pixel colors (H, W, 3) as produced by the tracer
        options: Render options of the pass that produced the buffer

    Returns:
        uint8 image of shape (H, W, 3)
    """
    if options.mode is RenderMode.DEPTH:
        image = normalize_depth(buffer)
    elif options.mode is RenderMode.NORMAL:
        image = pack_normal(buffer)
    else:
        image = tone_map(buffer)
    return to_ldr(image)
