"""
Skeleton model for BVH motion data.

This package provides:
    - Joint / JointKind / Channel: the joint tree and its channel contract
    - MotionData / BVHData: parsed motion block and full parse result
    - channel_order, bone_names, bone_connections: traversal helpers
"""

from .skeleton import (
    END_SITE_NAME,
    END_SITE_PREFIX,
    BoneConnection,
    BVHData,
    Channel,
    Joint,
    JointKind,
    MotionData,
    bone_connections,
    bone_names,
    channel_order,
    count_channels,
    end_site_name,
    iter_joints,
)

__all__ = [
    "END_SITE_NAME",
    "END_SITE_PREFIX",
    "BoneConnection",
    "BVHData",
    "Channel",
    "Joint",
    "JointKind",
    "MotionData",
    "bone_connections",
    "bone_names",
    "channel_order",
    "count_channels",
    "end_site_name",
    "iter_joints",
]
