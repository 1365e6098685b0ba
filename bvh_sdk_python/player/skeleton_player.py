"""
SkeletonPlayer - Owns a loaded BVH skeleton and plays it back frame by frame.

This module provides the SkeletonPlayer class, which keeps the runtime bone
table of the active skeleton together with its display scale and playback
clock. A renderer reads bone display positions and connections from it after
every update.
"""

import logging
import threading
from dataclasses import dataclass, field

import numpy as np

from ..parser.bvh_parser import parse, parse_file
from ..retargeter.normalizer import Normalizer, SkeletonScale
from ..skeleton.skeleton import bone_connections, end_site_name, iter_joints
from ..utils.fk_utils import evaluate_frame


log = logging.getLogger(__name__)


@dataclass
class BoneRuntime:
    """
    Runtime state of one bone of the active skeleton.

    Attributes:
        name: Bone identifier (joint name or EndSite_<parentName>)
        joint: Joint definition (End Site node for End Site bones)
        position: Current raw world position, rewritten on every frame
        is_end_site: True for End Site bones
        radius: Size of the bone's visual primitive
    """
    name: str
    joint: object
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    is_end_site: bool = False
    radius: float = 1.5


def _pose_bones(bones, positions):
    """Rewrite bone positions in place from an FK result."""
    for name, bone in bones.items():
        bone.position[:] = positions[name]


class SkeletonPlayer:
    """
    Holds the active BVH skeleton and advances its animation.

    Loading replaces all state at once. If loads overlap, the most recently
    started one wins and results of superseded loads are discarded.

    Example usage:
        player = SkeletonPlayer()
        player.load_file("motion.bvh")
        player.play()

        while running:
            player.update(dt)
            for name, pos in player.get_bone_positions().items():
                draw_sphere(name, pos)
            for connection in player.connections:
                draw_line(connection.parent, connection.child)
    """

    def __init__(self, normalizer: Normalizer = None):
        """
        Initialize the SkeletonPlayer.

        Args:
            normalizer: Normalizer used on each load (default config if None)
        """
        self.normalizer = normalizer if normalizer is not None else Normalizer()
        self.lock = threading.Lock()
        self._generation = 0
        self._reset_state()

    def _reset_state(self):
        self.data = None
        self.bones = {}
        self.connections = []
        self.skeleton_scale = SkeletonScale()
        self.current_frame = 0
        self.is_playing = False
        self.play_speed = 1.0
        self.frame_accumulator = 0.0

    def clear(self):
        """Discard the active skeleton and all derived state."""
        with self.lock:
            self._generation += 1
            self._reset_state()

    def load(self, text):
        """
        Parse BVH text and make it the active skeleton.

        Args:
            text: Full BVH document

        Returns:
            True if this load became active, False if a newer load superseded it.

        Raises:
            BVHParseError: if the document is invalid. The previously active
                skeleton is left untouched.
        """
        return self._load(lambda: parse(text))

    def load_file(self, filename):
        """Read a BVH file and make it the active skeleton. See load()."""
        return self._load(lambda: parse_file(filename))

    def _load(self, parse_fn):
        with self.lock:
            self._generation += 1
            generation = self._generation

        data = parse_fn()
        bones = self._create_bones(data.skeleton)
        connections = bone_connections(data.skeleton)
        skeleton_scale = self.normalizer.compute_normalization(data.skeleton, data.motion_data)

        # Pose the new table at frame 0 before anything is published
        positions = evaluate_frame(data.skeleton, data.motion_data, 0)
        if positions is not None:
            _pose_bones(bones, positions)

        with self.lock:
            if generation != self._generation:
                log.info("Discarding superseded load (generation %d)", generation)
                return False
            self._reset_state()
            self.data = data
            self.bones = bones
            self.connections = connections
            self.skeleton_scale = skeleton_scale

        log.info(
            "Skeleton ready: %d bones, %d frames, %.1f FPS",
            len(bones), data.frame_count, data.fps,
        )
        return True

    def _create_bones(self, skeleton):
        """Build the bone table of a skeleton, positions at the rest pose."""
        radii = self.normalizer.bone_radii(skeleton)
        bones = {}
        for joint in iter_joints(skeleton):
            if joint.is_end_site:
                continue
            if joint.channels:
                bones[joint.name] = BoneRuntime(
                    name=joint.name, joint=joint, radius=radii[joint.name],
                )
            for child in joint.children:
                if child.is_end_site:
                    name = end_site_name(joint.name)
                    bones[name] = BoneRuntime(
                        name=name, joint=child, is_end_site=True, radius=radii[name],
                    )
        return bones

    def _update_bones(self, frame_index):
        positions = evaluate_frame(self.data.skeleton, self.data.motion_data, frame_index)
        if positions is None:
            return False
        _pose_bones(self.bones, positions)
        self.current_frame = frame_index
        return True

    def set_frame(self, frame_index):
        """
        Pose the skeleton at a frame.

        Args:
            frame_index: Frame to show

        Returns:
            True if the pose changed, False if nothing is loaded or the index
            is out of range (the previous pose is kept).
        """
        with self.lock:
            if self.data is None:
                return False
            return self._update_bones(frame_index)

    def get_bone_positions(self, display=True):
        """
        Get the current bone positions.

        Args:
            display: Apply the skeleton's display scale if True, raw FK
                     positions otherwise

        Returns:
            Dict mapping bone name to position
        """
        with self.lock:
            positions = {name: bone.position.copy() for name, bone in self.bones.items()}
            if display:
                positions = self.skeleton_scale.apply(positions)
            return positions

    # Display facts

    @property
    def frame_count(self):
        return self.data.frame_count if self.data else 0

    @property
    def frame_time(self):
        return self.data.frame_time if self.data else 0.0

    @property
    def fps(self):
        return self.data.fps if self.data else 0.0

    @property
    def total_channels(self):
        return self.data.total_channels if self.data else 0

    @property
    def duration(self):
        return self.data.duration if self.data else 0.0

    # Playback

    def play(self):
        """Start advancing frames on update()."""
        self.is_playing = True

    def pause(self):
        """Stop advancing frames on update()."""
        self.is_playing = False

    def reset(self):
        """Stop playback and return to frame 0."""
        self.is_playing = False
        self.frame_accumulator = 0.0
        self.set_frame(0)

    def set_speed(self, speed):
        """Set the playback speed multiplier (1.0 = motion frame rate)."""
        if speed <= 0:
            raise ValueError(f"Playback speed must be positive, got {speed}")
        self.play_speed = speed

    def update(self, delta_seconds):
        """
        Advance playback by elapsed wall-clock time.

        Args:
            delta_seconds: Time since the previous update

        Returns:
            Number of frames advanced
        """
        if not self.is_playing or self.frame_count == 0:
            return 0

        self.frame_accumulator += delta_seconds * self.play_speed
        frames_to_advance = int(self.frame_accumulator // self.frame_time)
        if frames_to_advance <= 0:
            return 0

        self.frame_accumulator -= frames_to_advance * self.frame_time
        self.set_frame((self.current_frame + frames_to_advance) % self.frame_count)
        return frames_to_advance
