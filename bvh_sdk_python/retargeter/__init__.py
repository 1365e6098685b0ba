"""
Retargeter - Automatic normalization of BVH skeletons to a canonical size.

Skeletons come in arbitrary units and naming conventions. The Normalizer
locates the head and feet by name and scales the skeleton to a canonical
height with the feet on the ground, falling back to the bounding box of all
joints when names cannot be resolved.

Example usage:
    from bvh_sdk_python.retargeter import Normalizer

    normalizer = Normalizer(config="default")
    skeleton_scale = normalizer.compute_normalization(data.skeleton, data.motion_data)
    print(skeleton_scale.scale, skeleton_scale.vertical_offset)
"""

from .normalizer import NORMALIZE_CONFIG_DICT, Normalizer, SkeletonScale, compute_normalization

__all__ = [
    "NORMALIZE_CONFIG_DICT",
    "Normalizer",
    "SkeletonScale",
    "compute_normalization",
]
