"""
Utility functions for BVH forward kinematics.

This module provides:
    - fk_utils: Forward kinematics over a BVH joint tree
    - transform_utils: 4x4 homogeneous transform helpers
"""

from .fk_utils import compute_forward_kinematics, evaluate_frame
from .transform_utils import axis_rotation_matrix, channel_matrix, matrix_position, translation_matrix

__all__ = [
    "compute_forward_kinematics",
    "evaluate_frame",
    "axis_rotation_matrix",
    "channel_matrix",
    "matrix_position",
    "translation_matrix",
]
