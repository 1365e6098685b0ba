"""
Skeleton data structures for BVH motion data.

Provides the joint tree produced by the BVH parser and the motion block that
accompanies it. The traversal helpers here fix the frame column order.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, NamedTuple, Tuple

import numpy as np


# Name given to every End Site node. End Sites are identified by JointKind,
# never by name, so a joint declared as "JOINT End Site" stays a regular joint.
END_SITE_NAME = "End Site"

# Prefix of the synthetic bone identifier used for End Site leaves
END_SITE_PREFIX = "EndSite_"


class Channel(Enum):
    """BVH channel tokens in the order they may appear on a CHANNELS line."""
    XPOSITION = "Xposition"
    YPOSITION = "Yposition"
    ZPOSITION = "Zposition"
    XROTATION = "Xrotation"
    YROTATION = "Yrotation"
    ZROTATION = "Zrotation"

    @property
    def axis(self) -> str:
        """Lower-case axis letter ('x', 'y' or 'z')."""
        return self.value[0].lower()

    @property
    def is_rotation(self) -> bool:
        return self.value.endswith("rotation")

    @property
    def is_position(self) -> bool:
        return self.value.endswith("position")


class JointKind(Enum):
    """Types of nodes in a BVH hierarchy."""
    ROOT = auto()
    JOINT = auto()
    END_SITE = auto()


@dataclass(eq=False)
class Joint:
    """
    A node of the BVH joint tree.

    Attributes:
        name: Joint name (END_SITE_NAME for End Site leaves)
        kind: ROOT, JOINT or END_SITE
        offset: Translation from the parent joint, shape (3,)
        channels: Channels in the order they are applied
        children: Child joints in declaration order
    """
    name: str
    kind: JointKind
    offset: np.ndarray = field(default_factory=lambda: np.zeros(3))
    channels: List[Channel] = field(default_factory=list)
    children: List["Joint"] = field(default_factory=list)

    @property
    def is_end_site(self) -> bool:
        return self.kind is JointKind.END_SITE

    @property
    def num_channels(self) -> int:
        return len(self.channels)


@dataclass
class MotionData:
    """
    MOTION block of a BVH file.

    Attributes:
        frame_time: Seconds per frame
        frames: Channel values, shape (num_frames, total_channels)
        declared_frame_count: Value of the "Frames:" line
    """
    frame_time: float
    frames: np.ndarray
    declared_frame_count: int = 0

    @property
    def frame_count(self) -> int:
        """Number of frames actually read."""
        return len(self.frames)

    @property
    def fps(self) -> float:
        return 1.0 / self.frame_time

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.frame_count * self.frame_time

    @property
    def truncated(self) -> bool:
        """True if the file held fewer frame lines than it declared."""
        return self.frame_count < self.declared_frame_count

    def get_frame(self, frame_index: int):
        """Get channel values of one frame, or None if out of range."""
        if 0 <= frame_index < self.frame_count:
            return self.frames[frame_index]
        return None


@dataclass
class BVHData:
    """Result of parsing a BVH document."""
    skeleton: Joint
    motion_data: MotionData
    total_channels: int

    @property
    def frame_count(self) -> int:
        return self.motion_data.frame_count

    @property
    def frame_time(self) -> float:
        return self.motion_data.frame_time

    @property
    def fps(self) -> float:
        return self.motion_data.fps

    @property
    def duration(self) -> float:
        return self.motion_data.duration


class BoneConnection(NamedTuple):
    """A parent/child pair of bones, drawn as a line by renderers."""
    parent: str
    child: str
    is_end_site: bool


def end_site_name(parent_name: str) -> str:
    """Bone identifier of the End Site hanging off `parent_name`."""
    return f"{END_SITE_PREFIX}{parent_name}"


def iter_joints(joint: Joint) -> Iterator[Joint]:
    """Pre-order traversal over every node, End Sites included."""
    yield joint
    for child in joint.children:
        yield from iter_joints(child)


def count_channels(joint: Joint) -> int:
    """Sum of channel counts over the whole tree."""
    return sum(node.num_channels for node in iter_joints(joint))


def channel_order(joint: Joint) -> List[Tuple[str, Channel]]:
    """
    Get the (joint name, channel) pairs in frame column order.

    The order is a pre-order, depth-first walk with children visited in
    declaration order. Both the parser and the FK evaluator rely on it.
    """
    return [
        (node.name, channel)
        for node in iter_joints(joint)
        for channel in node.channels
    ]


def bone_names(joint: Joint) -> List[str]:
    """
    Get the runtime bone identifiers in traversal order.

    Joints with channels are keyed by name, End Sites by EndSite_<parent>.
    Joints without channels are not bones.
    """
    names = []

    def visit(node, parent):
        if node.is_end_site:
            if parent is not None:
                names.append(end_site_name(parent.name))
        elif node.channels:
            names.append(node.name)
        for child in node.children:
            visit(child, node)

    visit(joint, None)
    return names


def bone_connections(joint: Joint) -> List[BoneConnection]:
    """
    Get parent/child connections between bones.

    Only pairs whose both ends are bones are returned, which matches what a
    renderer can draw.
    """
    names = set(bone_names(joint))
    connections = []

    def visit(node):
        for child in node.children:
            child_name = end_site_name(node.name) if child.is_end_site else child.name
            if node.name in names and child_name in names:
                connections.append(BoneConnection(node.name, child_name, child.is_end_site))
            visit(child)

    visit(joint)
    return connections
