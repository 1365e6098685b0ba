"""
Forward kinematics utilities for BVH motion data.

This module converts one frame of BVH channel values into world-space joint
positions by walking the joint tree and composing local transforms.
"""

import numpy as np

from ..skeleton.skeleton import count_channels, end_site_name
from .transform_utils import channel_matrix, matrix_position, translation_matrix


def _evaluate_joint(joint, values, cursor, parent_world, positions):
    """
    Evaluate one joint and its subtree.

    Args:
        joint: Joint to evaluate (never an End Site)
        values: Channel values of the frame
        cursor: Index of this joint's first channel value in `values`
        parent_world: 4x4 world transform of the parent
        positions: Dict receiving bone name -> world position

    Returns:
        Cursor position after this subtree's channels
    """
    local = translation_matrix(joint.offset)
    for channel in joint.channels:
        local = local @ channel_matrix(channel, values[cursor])
        cursor += 1

    world = parent_world @ local
    positions[joint.name] = matrix_position(world)

    for child in joint.children:
        if child.is_end_site:
            # End Sites have no channels; only their offset is applied
            end_world = world @ translation_matrix(child.offset)
            positions[end_site_name(joint.name)] = matrix_position(end_world)
        else:
            cursor = _evaluate_joint(child, values, cursor, world, positions)

    return cursor


def compute_forward_kinematics(skeleton, frame):
    """
    Compute world positions for every joint from one frame of channel values.

    This function:
    1. Builds each joint's local transform: translate(offset), then every
       channel applied in declared order (rotation values in degrees)
    2. Composes it with the parent's world transform (identity for the root)
    3. Records the translation of the world transform as the joint position
    4. Records End Site positions under EndSite_<parentName>

    Non-numeric (NaN) channel values are treated as zero.

    Args:
        skeleton: Root Joint of the tree
        frame: Channel values, length equal to the tree's channel total

    Returns:
        Dict mapping bone name to world position (np.array of shape (3,))
    """
    frame = np.asarray(frame, dtype=np.float64)
    total_channels = count_channels(skeleton)
    if frame.shape != (total_channels,):
        raise ValueError(
            f"Frame has shape {frame.shape}, expected ({total_channels},)"
        )
    values = np.where(np.isnan(frame), 0.0, frame)

    positions = {}
    _evaluate_joint(skeleton, values, 0, np.eye(4), positions)
    return positions


def evaluate_frame(skeleton, motion_data, frame_index):
    """
    Evaluate the pose of one frame of a loaded motion.

    Args:
        skeleton: Root Joint of the tree
        motion_data: MotionData the skeleton was parsed with
        frame_index: Index of the frame to evaluate

    Returns:
        Dict mapping bone name to world position, or None if frame_index is
        out of range (callers keep their previous pose).
    """
    frame = motion_data.get_frame(frame_index)
    if frame is None:
        return None
    return compute_forward_kinematics(skeleton, frame)
