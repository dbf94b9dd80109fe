#!/usr/bin/env python3
"""
Fuse six-view depth-color image sequences into volumetric frames.

Reads images named like '0001nx.png' ... '0001pz.png' from a base directory
and writes one volume file per frame holding an RGB and an Alpha field.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add project src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pydantic import ValidationError

from depthfuse.exceptions import PipelineError
from depthfuse.logging_config import setup_logging
from depthfuse.orchestration.frame_sequencer import FrameSequencer
from depthfuse.types.types_IDL import FusionConfig
from depthfuse.utils.frame_files import discover_frames

logger = logging.getLogger(__name__)


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Fuse six orthographic depth-color views into volumetric frames",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fuse frames 1-25 at the default 128^3 resolution
  python run_fusion.py --base-dir textures/viewdepthmaps --output-dir volumes \\
    --start-frame 1 --end-frame 25

  # Fuse every frame found in the directory, writing HDF5
  python run_fusion.py --base-dir textures/viewdepthmaps --output-dir volumes \\
    --output-format hdf5 --verbose
        """,
    )

    parser.add_argument("--base-dir", type=str, required=True, help="Directory holding the view images")
    parser.add_argument("--output-dir", type=str, required=True, help="Directory for the fused volumes")
    parser.add_argument("--start-frame", type=int, help="First frame (default: first frame found)")
    parser.add_argument("--end-frame", type=int, help="Last frame, inclusive (default: last frame found)")
    parser.add_argument("--texture-size", type=int, default=128, help="Grid edge length N")
    parser.add_argument("--output-prefix", type=str, default="output_", help="Prefix of output filenames")
    parser.add_argument("--image-extension", type=str, default=".png", help="Extension of the view images")
    parser.add_argument("--depth-threshold", type=float, default=0.05, help="Background rejection margin")
    parser.add_argument("--padding", type=int, default=0, help="Border pixels skipped per image edge")
    parser.add_argument(
        "--backend", choices=["sequential", "scatter"], default="scatter", help="Voxel reduction backend"
    )
    parser.add_argument("--output-format", choices=["npz", "hdf5"], default="npz", help="Volume file format")
    parser.add_argument("--max-workers", type=int, default=1, help="Threads used to map views")
    parser.add_argument("--log-file", type=str, help="Optional log file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> FusionConfig:
    """Create a FusionConfig, filling an open frame range from the directory."""
    start_frame, end_frame = args.start_frame, args.end_frame
    if start_frame is None or end_frame is None:
        frames = sorted(discover_frames(args.base_dir, args.image_extension))
        if not frames:
            raise PipelineError(f"No view images found in {args.base_dir}")
        start_frame = frames[0] if start_frame is None else start_frame
        end_frame = frames[-1] if end_frame is None else end_frame

    return FusionConfig(
        start_frame=start_frame,
        end_frame=end_frame,
        base_dir=args.base_dir,
        texture_size=args.texture_size,
        output_dir=args.output_dir,
        output_prefix=args.output_prefix,
        verbose=args.verbose,
        image_extension=args.image_extension,
        depth_threshold=args.depth_threshold,
        padding=args.padding,
        accumulator_backend=args.backend,
        output_format=args.output_format,
        max_workers=args.max_workers,
    )


def main(argv=None) -> int:
    args = parse_arguments(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    try:
        config = build_config(args)
        outcomes = FrameSequencer(config).run()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except PipelineError as e:
        logger.error(str(e))
        return 1

    n_partial = sum(1 for outcome in outcomes if outcome.status != "SUCCESS")
    print(f"Fused {len(outcomes)} frames ({n_partial} partial or empty)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
