"""
BVH SDK Python - BVH motion capture parsing, forward kinematics and normalization.

This package turns BVH motion capture files into animated skeletons: a joint
tree with per-frame world-space joint positions, scaled to a canonical height
for display.

Main classes:
    - parse / parse_file: Parse BVH text into a joint tree and motion data
    - evaluate_frame: Forward kinematics for one frame
    - Normalizer: Scales any skeleton to a canonical height
    - SkeletonPlayer: Bone table, display scale and playback for renderers

Example usage:
    from bvh_sdk_python import SkeletonPlayer

    # Initialize
    player = SkeletonPlayer()
    player.load_file("motion.bvh")
    print(f"{player.frame_count} frames, {player.total_channels} channels, {player.fps:.1f} FPS")

    # Main loop
    player.play()
    while running:
        player.update(dt)
        positions = player.get_bone_positions()
        # positions["Head"] = display position of the Head joint
        # positions["EndSite_Head"] = display position of its End Site
"""

import logging

from .parser import BVHParseError, parse, parse_file
from .player import BoneRuntime, SkeletonPlayer
from .retargeter import Normalizer, SkeletonScale, compute_normalization
from .skeleton import BVHData, Channel, Joint, JointKind, MotionData, channel_order
from .utils import compute_forward_kinematics, evaluate_frame

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "BVHParseError",
    "parse",
    "parse_file",
    "BoneRuntime",
    "SkeletonPlayer",
    "Normalizer",
    "SkeletonScale",
    "compute_normalization",
    "BVHData",
    "Channel",
    "Joint",
    "JointKind",
    "MotionData",
    "channel_order",
    "compute_forward_kinematics",
    "evaluate_frame",
]
