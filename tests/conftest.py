from __future__ import annotations

import pytest

from bvh_sdk_python import parse

SIMPLE_BVH = """\
HIERARCHY
ROOT Hip
{
  OFFSET 0 0 0
  CHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation
  JOINT Head
  {
    OFFSET 0 20 0
    CHANNELS 3 Zrotation Xrotation Yrotation
    End Site
    {
      OFFSET 0 5 0
    }
  }
}
MOTION
Frames: 1
Frame Time: 0.0333333
0 0 0 0 0 0 0 0 0
"""

# Hips at y=90 in frame 0: Head at y=130, feet End Sites at y=0.
HUMANOID_HIERARCHY = """\
ROOT Hips
{
  OFFSET 0 0 0
  CHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation
  JOINT Spine
  {
    OFFSET 0 10 0
    CHANNELS 3 Zrotation Xrotation Yrotation
    JOINT Neck
    {
      OFFSET 0 20 0
      CHANNELS 3 Zrotation Xrotation Yrotation
      JOINT Head
      {
        OFFSET 0 10 0
        CHANNELS 3 Zrotation Xrotation Yrotation
        End Site
        {
          OFFSET 0 8 0
        }
      }
    }
  }
  JOINT LeftUpLeg
  {
    OFFSET 10 0 0
    CHANNELS 3 Zrotation Xrotation Yrotation
    JOINT LeftLeg
    {
      OFFSET 0 -45 0
      CHANNELS 3 Zrotation Xrotation Yrotation
      JOINT LeftFoot
      {
        OFFSET 0 -40 0
        CHANNELS 3 Zrotation Xrotation Yrotation
        End Site
        {
          OFFSET 0 -5 5
        }
      }
    }
  }
  JOINT RightUpLeg
  {
    OFFSET -10 0 0
    CHANNELS 3 Zrotation Xrotation Yrotation
    JOINT RightLeg
    {
      OFFSET 0 -45 0
      CHANNELS 3 Zrotation Xrotation Yrotation
      JOINT RightFoot
      {
        OFFSET 0 -40 0
        CHANNELS 3 Zrotation Xrotation Yrotation
        End Site
        {
          OFFSET 0 -5 5
        }
      }
    }
  }
}
"""

HUMANOID_CHANNELS = 30

# No Head/Neck and no foot names: normalization must use the bounding box.
HEADLESS_HIERARCHY = """\
ROOT Pelvis
{
  OFFSET 0 0 0
  CHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation
  JOINT Chest
  {
    OFFSET 0 50 0
    CHANNELS 3 Zrotation Xrotation Yrotation
    End Site
    {
      OFFSET 0 10 0
    }
  }
}
"""


def _make_bvh(hierarchy, frames, frame_time=0.0333333, declared=None):
    """Build a BVH document from a hierarchy body and frame rows."""
    if declared is None:
        declared = len(frames)
    lines = ["HIERARCHY", hierarchy.rstrip(), "MOTION", f"Frames: {declared}", f"Frame Time: {frame_time}"]
    for frame in frames:
        lines.append(frame if isinstance(frame, str) else " ".join(str(v) for v in frame))
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_bvh():
    return _make_bvh


@pytest.fixture
def simple_bvh() -> str:
    return SIMPLE_BVH


@pytest.fixture
def humanoid_bvh() -> str:
    frame0 = [0, 90, 0] + [0] * (HUMANOID_CHANNELS - 3)
    frame1 = [5, 90, 0] + [0] * (HUMANOID_CHANNELS - 3)
    return _make_bvh(HUMANOID_HIERARCHY, [frame0, frame1])


@pytest.fixture
def headless_bvh() -> str:
    return _make_bvh(HEADLESS_HIERARCHY, [[0] * 9])


@pytest.fixture
def humanoid(humanoid_bvh):
    return parse(humanoid_bvh)


@pytest.fixture
def headless(headless_bvh):
    return parse(headless_bvh)
