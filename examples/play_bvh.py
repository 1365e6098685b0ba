#!/usr/bin/env python3
"""
Example: BVH file playback.

This script demonstrates how to use SkeletonPlayer to load a BVH file and
play it back in real time, the way a renderer would drive it.

Usage:
    python play_bvh.py --bvh_file path/to/motion.bvh --speed 1.0

Output:
    - Prints file information and the normalization result
    - Prints the display position of a tracked bone while playing
"""

import argparse
import logging

from loop_rate_limiters import RateLimiter

from bvh_sdk_python import Normalizer, SkeletonPlayer


def main():
    parser = argparse.ArgumentParser(description="BVH playback")

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
        "--speed",
        type=float,
        default=1.0,
        help="Playback speed multiplier (default: 1.0)",
    )

    parser.add_argument(
        "--render_fps",
        type=int,
        default=60,
        help="Update rate of the playback loop (default: 60)",
    )

    parser.add_argument(
        "--loops",
        type=int,
        default=1,
        help="Number of times to play the motion (default: 1)",
    )

    parser.add_argument(
        "--bone",
        type=str,
        default="Head",
        help="Bone whose position is printed (default: Head)",
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

    # Load BVH file
    player = SkeletonPlayer(normalizer=Normalizer(config=args.config))
    print(f"Loading BVH file: {args.bvh_file}")
    player.load_file(args.bvh_file)
    print(f"Loaded {player.frame_count} frames, {player.total_channels} channels, "
          f"{player.fps:.1f} FPS ({player.duration:.2f}s)")

    skeleton_scale = player.skeleton_scale
    print(f"Normalization ({skeleton_scale.method}): scale={skeleton_scale.scale:.3f}, "
          f"vertical offset={skeleton_scale.vertical_offset:.2f}")

    if args.bone not in player.bones:
        print(f"Bone {args.bone!r} not found, tracking {next(iter(player.bones), None)!r}")
        args.bone = next(iter(player.bones), None)

    # Play
    player.set_speed(args.speed)
    player.play()
    rate_limiter = RateLimiter(frequency=args.render_fps, warn=False)

    played_time = 0.0
    total_time = player.duration * args.loops / args.speed
    last_frame = -1

    while played_time < total_time:
        player.update(rate_limiter.dt)
        played_time += rate_limiter.dt

        if args.bone is not None and player.current_frame != last_frame:
            last_frame = player.current_frame
            if args.verbose or last_frame % 30 == 0:
                pos = player.get_bone_positions()[args.bone]
                print(f"  Frame {last_frame}/{player.frame_count}: "
                      f"{args.bone} = ({pos[0]:.2f}, {pos[1]:.2f}, {pos[2]:.2f})")

        rate_limiter.sleep()

    player.pause()
    print("Playback finished")


if __name__ == "__main__":
    main()
