#!/usr/bin/env python3
"""
Example: Inspect a BVH file.

Prints the joint hierarchy, display facts, normalization result and the
world positions of the first frame.

Usage:
    python bvh_info.py --bvh_file path/to/motion.bvh
"""

import argparse
import logging
import sys

from bvh_sdk_python import BVHParseError, Normalizer, evaluate_frame, parse_file


def print_hierarchy(joint, depth=0):
    channels = " ".join(c.value for c in joint.channels)
    print(f"{'  ' * depth}{joint.name} offset={joint.offset.tolist()} [{channels}]")
    for child in joint.children:
        print_hierarchy(child, depth + 1)


def main():
    parser = argparse.ArgumentParser(description="BVH file information")

    parser.add_argument(
        "--bvh_file",
        type=str,
        required=True,
        help="Path to BVH motion file",
    )

    parser.add_argument(
        "--config",
        choices=["default", "mixamo"],
        default="default",
        help="Joint naming convention used for normalization",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print verbose output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="[%(name)s] %(message)s",
    )

    try:
        data = parse_file(args.bvh_file)
    except BVHParseError as e:
        print(f"Failed to load {args.bvh_file}: {e}")
        return 1

    print("Hierarchy:")
    print_hierarchy(data.skeleton, 1)

    motion = data.motion_data
    print(f"\nFrames: {motion.frame_count} (declared {motion.declared_frame_count})")
    print(f"Frame time: {motion.frame_time:.6f}s ({motion.fps:.1f} FPS)")
    print(f"Duration: {motion.duration:.2f}s")
    print(f"Channels: {data.total_channels}")

    skeleton_scale = Normalizer(config=args.config).compute_normalization(data.skeleton, motion)
    print(f"\nNormalization ({skeleton_scale.method}): scale={skeleton_scale.scale:.3f}, "
          f"vertical offset={skeleton_scale.vertical_offset:.2f}")

    positions = evaluate_frame(data.skeleton, motion, 0)
    if positions is not None:
        print("\nFrame 0 world positions:")
        for name, pos in positions.items():
            print(f"  {name}: ({pos[0]:.2f}, {pos[1]:.2f}, {pos[2]:.2f})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
