"""
Normalizer class for automatic retargeting of BVH skeletons to a canonical size.
"""

import json
import logging
import pathlib
from dataclasses import dataclass, field

import numpy as np

from ..skeleton.skeleton import bone_names, end_site_name, iter_joints
from ..utils.fk_utils import evaluate_frame


log = logging.getLogger(__name__)

# Package paths
HERE = pathlib.Path(__file__).parent
CONFIG_ROOT = HERE / "configs"

# Name heuristic configs, one per skeleton naming convention
NORMALIZE_CONFIG_DICT = {
    "default": CONFIG_ROOT / "normalize_default.json",
    "mixamo": CONFIG_ROOT / "normalize_mixamo.json",
}


@dataclass
class SkeletonScale:
    """
    Uniform scale and translation applied to a skeleton for display.

    Attributes:
        scale: Uniform scale factor of the skeleton group
        offset: Translation of the skeleton group, shape (3,)
        method: "heuristic", "bounding_box" or "identity"
    """
    scale: float = 1.0
    offset: np.ndarray = field(default_factory=lambda: np.zeros(3))
    method: str = "identity"

    @property
    def vertical_offset(self) -> float:
        return float(self.offset[1])

    @property
    def primitive_scale(self) -> float:
        """Scale for size-bearing primitives so their on-screen size is unchanged."""
        return 1.0 / self.scale

    def apply_position(self, position):
        """Map a raw FK position to its display position."""
        return np.asarray(position) * self.scale + self.offset

    def apply(self, positions):
        """
        Map raw FK positions to display positions.

        Args:
            positions: Dict mapping bone name to world position

        Returns:
            New dict mapping bone name to display position
        """
        return {name: self.apply_position(pos) for name, pos in positions.items()}


class Normalizer:
    """
    Rescales and repositions arbitrary skeletons to a canonical height.

    The head is located by name (Head, then Neck) and the feet by the lowest
    match among known foot joint and foot End Site names. The skeleton is
    scaled so head-to-foot height equals the canonical height and moved so the
    foot rests at the ground offset. When the names cannot be resolved, the
    bounding box of all joint primitives is used instead.

    Example usage:
        normalizer = Normalizer(config="default")
        skeleton_scale = normalizer.compute_normalization(data.skeleton, data.motion_data)
        display = skeleton_scale.apply(evaluate_frame(data.skeleton, data.motion_data, 10))
    """

    def __init__(self, config: str = "default", config_path=None, **overrides):
        """
        Initialize the normalizer.

        Args:
            config: Name of a bundled config ("default" or "mixamo")
            config_path: Path to a JSON config file, takes precedence over `config`
            **overrides: Individual config entries to replace
        """
        if config_path is None:
            if config not in NORMALIZE_CONFIG_DICT:
                raise ValueError(f"Unknown normalize config: {config}. "
                                 f"Supported: {list(NORMALIZE_CONFIG_DICT.keys())}")
            config_path = NORMALIZE_CONFIG_DICT[config]

        with open(config_path) as f:
            normalize_config = json.load(f)

        unknown = set(overrides) - set(normalize_config)
        if unknown:
            raise ValueError(f"Unknown normalize config keys: {sorted(unknown)}")
        normalize_config.update(overrides)

        # Name heuristics
        self.head_names = list(normalize_config["head_names"])
        self.foot_names = list(normalize_config["foot_names"])
        self.foot_end_site_names = list(normalize_config["foot_end_site_names"])

        # Heuristic placement
        self.canonical_height = float(normalize_config["canonical_height"])
        self.ground_offset = float(normalize_config["ground_offset"])
        self.min_body_height = float(normalize_config["min_body_height"])

        # Bounding-box fallback
        self.fallback_target_size = float(normalize_config["fallback_target_size"])
        self.fallback_vertical_offset = float(normalize_config["fallback_vertical_offset"])

        # Visual primitive sizes
        self.joint_radius = float(normalize_config["joint_radius"])
        self.end_site_radius = float(normalize_config["end_site_radius"])

    def bone_radii(self, skeleton):
        """Get the primitive radius of every bone of a skeleton."""
        end_sites = {
            end_site_name(joint.name)
            for joint in iter_joints(skeleton)
            if any(child.is_end_site for child in joint.children)
        }
        return {
            name: self.end_site_radius if name in end_sites else self.joint_radius
            for name in bone_names(skeleton)
        }

    def find_head_position(self, bones):
        """Get the position of the first head candidate present, or None."""
        for name in self.head_names:
            if name in bones:
                return np.array(bones[name])
        return None

    def find_lowest_foot_position(self, bones):
        """
        Get the lowest foot position.

        Foot joint names are searched first, then foot End Site names; the
        lowest match wins. Without any match the lowest bone is used.
        """
        lowest = None
        for name in self.foot_names + self.foot_end_site_names:
            pos = bones.get(name)
            if pos is not None and (lowest is None or pos[1] < lowest[1]):
                lowest = pos

        if lowest is None:
            return self.find_absolute_lowest_position(bones)
        return np.array(lowest)

    @staticmethod
    def find_absolute_lowest_position(bones):
        """Get the lowest position among all bones, or None if there are none."""
        if not bones:
            return None
        return np.array(min(bones.values(), key=lambda pos: pos[1]))

    def heuristic_scaling(self, bones):
        """
        Scale from head and foot positions.

        Returns:
            SkeletonScale, or None if head/foot cannot be resolved or the body
            height is degenerate.
        """
        head = self.find_head_position(bones)
        foot = self.find_lowest_foot_position(bones)

        if head is None or foot is None:
            log.warning("Could not find head or foot positions, using bounding-box scaling")
            return None

        body_height = head[1] - foot[1]
        if body_height <= self.min_body_height:
            log.warning("Invalid body height %.2f, using bounding-box scaling", body_height)
            return None

        scale = self.canonical_height / body_height
        offset = np.array([0.0, -foot[1] * scale + self.ground_offset, 0.0])

        log.info(
            "Skeleton scaled by %.3f (height: %.2f -> %s), foot positioned at ground",
            scale, body_height, self.canonical_height,
        )
        return SkeletonScale(scale=scale, offset=offset, method="heuristic")

    def fallback_scaling(self, bones, radii=None):
        """
        Scale from the bounding box of all bone primitives.

        Args:
            bones: Dict mapping bone name to world position
            radii: Dict mapping bone name to primitive radius (joint_radius
                   for missing entries)

        Returns:
            SkeletonScale; identity if there is nothing to bound.
        """
        if not bones:
            return SkeletonScale()

        radii = radii or {}
        centers = np.array([bones[name] for name in bones])
        r = np.array([radii.get(name, self.joint_radius) for name in bones])[:, np.newaxis]
        box_min = (centers - r).min(axis=0)
        box_max = (centers + r).max(axis=0)

        max_dimension = (box_max - box_min).max()
        if max_dimension <= 0:
            return SkeletonScale()

        scale = self.fallback_target_size / max_dimension
        center = (box_min + box_max) / 2.0 * scale
        offset = np.array([-center[0], -center[1] + self.fallback_vertical_offset, -center[2]])

        log.info(
            "Skeleton normalized from bounding box: scale=%.3f, size=%.2f -> %s",
            scale, max_dimension, self.fallback_target_size,
        )
        return SkeletonScale(scale=scale, offset=offset, method="bounding_box")

    def compute_normalization(self, skeleton, motion_data):
        """
        Compute the display scale of a skeleton from its first frame.

        Args:
            skeleton: Root Joint of the tree
            motion_data: MotionData of the skeleton

        Returns:
            SkeletonScale to apply to every subsequent frame
        """
        positions = evaluate_frame(skeleton, motion_data, 0)
        if positions is None:
            log.warning("No frames to measure, skipping normalization")
            return SkeletonScale()

        bones = {name: positions[name] for name in bone_names(skeleton) if name in positions}

        skeleton_scale = self.heuristic_scaling(bones)
        if skeleton_scale is None:
            skeleton_scale = self.fallback_scaling(bones, self.bone_radii(skeleton))
        return skeleton_scale


def compute_normalization(skeleton, motion_data, normalizer=None):
    """
    Compute the display scale of a skeleton with the given (or default) normalizer.

    Returns:
        SkeletonScale with scale and vertical_offset
    """
    if normalizer is None:
        normalizer = Normalizer()
    return normalizer.compute_normalization(skeleton, motion_data)
