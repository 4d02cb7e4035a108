"""
Renderer module - the entry point feeding the tracer.

Implements:
- The row-major render loop (one primary ray per pixel centre)
- Progress reporting
- Post-processing and image output
"""

from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from .camera import Camera, CameraOptions
from .options import RenderOptions
from .scene import Scene
from .scene_parser import load_scene
from .tracer import ray_cast
from .postprocess import post_process

logger = logging.getLogger(__name__)


class Renderer:
    """Single-threaded Whitted ray tracing renderer."""

    def __init__(self, options: Optional[RenderOptions] = None):
        """Create a renderer with the given options.

        Args:
            options: Render configuration (uses defaults if None)
        """
        self.options = options if options else RenderOptions()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def trace(self, scene: Scene, camera: Camera) -> np.ndarray:
        """Trace every pixel and return the raw color buffer.

        Args:
            scene: The scene to render
            camera: Camera mapping pixels to rays

        Returns:
            Unclamped linear buffer of shape (height, width, 3)
        """
        height, width = camera.height, camera.width
        buffer = np.zeros((height, width, 3), dtype=np.float64)

        start = time.perf_counter()
        for row in range(height):
            for col in range(width):
                ray = camera.make_ray(row, col)
                buffer[row, col] = ray_cast(scene, ray, self.options).to_array()

            if self._progress_callback:
                self._progress_callback((row + 1) / height)

        logger.info(
            "Traced %dx%d pixels at depth %d in %.2fs",
            width, height, self.options.depth, time.perf_counter() - start
        )
        return buffer

    def render(self, scene: Scene, camera: Camera) -> np.ndarray:
        """Render the scene and return the final 8-bit image.

        Returns:
            uint8 image of shape (height, width, 3)
        """
        return post_process(self.trace(scene, camera), self.options)

    def save_image(self, image: np.ndarray, filename) -> None:
        """Save an 8-bit image to file (extension determines format)."""
        from PIL import Image as PILImage

        PILImage.fromarray(image, 'RGB').save(str(filename))
        logger.info("Saved %s", filename)


def render(
    scene_source: Union[str, Path, Scene],
    camera_options: CameraOptions,
    render_options: Optional[RenderOptions] = None
) -> np.ndarray:
    """Render a scene file (or an already loaded scene) to an 8-bit image.

    Args:
        scene_source: Path to an OBJ/YAML/JSON scene, or a Scene
        camera_options: Camera placement and raster size
        render_options: Depth bound and mode (defaults if None)

    Returns:
        uint8 image of shape (screen_height, screen_width, 3)
    """
    scene = scene_source if isinstance(scene_source, Scene) else load_scene(scene_source)
    renderer = Renderer(render_options)
    return renderer.render(scene, Camera(camera_options))
