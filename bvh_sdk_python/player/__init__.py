"""
Player module for bvh_sdk_python.

Provides SkeletonPlayer, which owns the active skeleton's bone table and
display scale and advances its animation for a renderer.
"""

from .skeleton_player import BoneRuntime, SkeletonPlayer

__all__ = ["BoneRuntime", "SkeletonPlayer"]
