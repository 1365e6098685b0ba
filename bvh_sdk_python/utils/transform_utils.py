"""
Homogeneous transform utilities for BVH forward kinematics.

All transforms are 4x4 float64 matrices acting on column vectors.
Rotation angles are in degrees, as stored in BVH files.
"""

import numpy as np
from scipy.spatial.transform import Rotation as R


def translation_matrix(v):
    """
    Build a translation matrix.

    Args:
        v: 3D translation (x, y, z)

    Returns:
        4x4 transform translating by v
    """
    m = np.eye(4)
    m[:3, 3] = v
    return m


def axis_rotation_matrix(axis, degrees):
    """
    Build a rotation matrix about a principal axis.

    Args:
        axis: 'x', 'y' or 'z'
        degrees: Rotation angle in degrees

    Returns:
        4x4 transform rotating about the given axis
    """
    m = np.eye(4)
    m[:3, :3] = R.from_euler(axis, degrees, degrees=True).as_matrix()
    return m


def channel_matrix(channel, value):
    """
    Build the transform contributed by one BVH channel value.

    Args:
        channel: Channel enum member
        value: Channel value (units for positions, degrees for rotations)

    Returns:
        4x4 transform for the channel
    """
    if channel.is_rotation:
        return axis_rotation_matrix(channel.axis, value)
    v = np.zeros(3)
    v["xyz".index(channel.axis)] = value
    return translation_matrix(v)


def matrix_position(m):
    """Translation component of a 4x4 transform."""
    return m[:3, 3].copy()
