#!/usr/bin/env python3
"""
prismtrace - A Python Whitted Ray Tracer

Main entry point for rendering scene files.
"""

import argparse
import logging
import math
import sys
import time
from pathlib import Path

from prismtrace.vec3 import Point3
from prismtrace.camera import Camera, CameraOptions
from prismtrace.options import RenderMode, RenderOptions
from prismtrace.renderer import Renderer
from prismtrace.scene import SceneParseError
from prismtrace.scene_parser import SceneParser
from prismtrace.obj_loader import load_obj


def _point(text: str) -> Point3:
    try:
        x, y, z = (float(c) for c in text.split(','))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected x,y,z, got '{text}'")
    return Point3(x, y, z)


def _override(flag, section, attr: str, default):
    """A given flag wins over the scene file section, which wins over the default."""
    if flag is not None:
        return flag
    if section is not None:
        return getattr(section, attr)
    return default


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='prismtrace - A Python Whitted Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py scenes/box.obj --output box.png
  python main.py scenes/glass.obj --look-from 0,1,4 --look-to 0,0,0 --depth 6
  python main.py scenes/box.obj --mode depth --output depth.png
        '''
    )

    parser.add_argument('scene', type=str, help='Scene file (.obj, .yaml, .yml or .json)')
    parser.add_argument('--width', type=int, default=None, help='Image width (default: 640)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 480)')
    parser.add_argument('--fov', type=float, default=None, help='Vertical field of view in degrees (default: 90)')
    parser.add_argument('--look-from', type=_point, default=None, help='Camera position x,y,z')
    parser.add_argument('--look-to', type=_point, default=None, help='Camera target x,y,z')
    parser.add_argument('--depth', type=int, default=None, help='Recursion depth (default: 4)')
    parser.add_argument('--mode', type=str, default=None, choices=[m.value for m in RenderMode],
                        help='Render mode (default: full)')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    # Load scene; YAML/JSON files may carry camera and render sections
    camera_options = None
    render_options = None
    try:
        if Path(args.scene).suffix.lower() == '.obj':
            scene = load_obj(args.scene)
        else:
            scene, camera_options, render_options = SceneParser().parse_file(args.scene)
    except SceneParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Command line flags override the scene file
    try:
        camera_options = CameraOptions(
            screen_width=_override(args.width, camera_options, 'screen_width', 640),
            screen_height=_override(args.height, camera_options, 'screen_height', 480),
            fov=_override(
                math.radians(args.fov) if args.fov is not None else None,
                camera_options, 'fov', math.pi / 2
            ),
            look_from=_override(args.look_from, camera_options, 'look_from', Point3(0, 0, 0)),
            look_to=_override(args.look_to, camera_options, 'look_to', Point3(0, 0, -1))
        )
        render_options = RenderOptions(
            depth=_override(args.depth, render_options, 'depth', 4),
            mode=_override(args.mode, render_options, 'mode', RenderMode.FULL)
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print("=" * 60)
    print("prismtrace Ray Tracer")
    print("=" * 60)
    print(f"Scene: {args.scene} ({len(scene)} objects, {len(scene.lights)} lights)")
    print(f"Resolution: {camera_options.screen_width}x{camera_options.screen_height}")
    print(f"Depth: {render_options.depth}  Mode: {render_options.mode.value}")

    renderer = Renderer(render_options)

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    start_time = time.time()
    image = renderer.render(scene, Camera(camera_options))
    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    renderer.save_image(image, output_path)
    print(f"Saved to: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
