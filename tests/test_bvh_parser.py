"""BVH parser tests - hierarchy grammar, motion block and error reporting."""

from __future__ import annotations

import logging
import math

import pytest

from bvh_sdk_python.parser import BVHParseError, parse, parse_file
from bvh_sdk_python.skeleton import (
    END_SITE_NAME,
    Channel,
    JointKind,
    channel_order,
    count_channels,
    iter_joints,
)

ONE_JOINT = """\
ROOT Hip
{
  OFFSET 1 2 3
  CHANNELS 3 Xposition Yposition Zposition
}
"""


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------

class TestHierarchy:
    def test_simple_tree(self, simple_bvh):
        data = parse(simple_bvh)
        root = data.skeleton
        assert root.name == "Hip"
        assert root.kind is JointKind.ROOT
        assert root.channels == [
            Channel.XPOSITION, Channel.YPOSITION, Channel.ZPOSITION,
            Channel.ZROTATION, Channel.XROTATION, Channel.YROTATION,
        ]

        (head,) = root.children
        assert head.name == "Head"
        assert head.kind is JointKind.JOINT
        assert head.offset.tolist() == [0.0, 20.0, 0.0]

        (end_site,) = head.children
        assert end_site.kind is JointKind.END_SITE
        assert end_site.name == END_SITE_NAME
        assert end_site.channels == []
        assert end_site.offset.tolist() == [0.0, 5.0, 0.0]

    def test_total_channels(self, simple_bvh):
        assert parse(simple_bvh).total_channels == 9

    def test_total_channels_matches_tree_and_frames(self, humanoid):
        per_joint = sum(
            len(j.channels) for j in iter_joints(humanoid.skeleton)
            if j.kind is not JointKind.END_SITE
        )
        assert humanoid.total_channels == per_joint == 30
        assert humanoid.total_channels == count_channels(humanoid.skeleton)
        assert humanoid.total_channels == len(channel_order(humanoid.skeleton))
        assert humanoid.motion_data.frames.shape[1] == humanoid.total_channels

    def test_children_keep_declaration_order(self, humanoid):
        names = [child.name for child in humanoid.skeleton.children]
        assert names == ["Spine", "LeftUpLeg", "RightUpLeg"]

    def test_offset_defaults_to_zero(self, make_bvh):
        text = make_bvh("ROOT Hip\n{\nCHANNELS 1 Xrotation\n}", [[0]])
        assert parse(text).skeleton.offset.tolist() == [0.0, 0.0, 0.0]

    def test_unrecognized_lines_are_ignored(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nOFFSET 0 0 0\nCOMMENT exported by tool\nCHANNELS 1 Yrotation\n}"
        data = parse(make_bvh(hierarchy, [[45]]))
        assert data.skeleton.channels == [Channel.YROTATION]

    def test_missing_closing_brace_is_tolerated(self, make_bvh):
        hierarchy = ONE_JOINT.rstrip().rsplit("}", 1)[0]
        data = parse(make_bvh(hierarchy, [[0, 0, 0]]))
        assert data.skeleton.name == "Hip"
        assert data.total_channels == 3

    def test_joint_named_end_site_is_a_joint(self, make_bvh):
        hierarchy = (
            "ROOT Hip\n{\nCHANNELS 1 Xrotation\n"
            "JOINT End Site\n{\nOFFSET 0 5 0\nCHANNELS 1 Yrotation\n}\n}"
        )
        data = parse(make_bvh(hierarchy, [[0, 0]]))
        (child,) = data.skeleton.children
        assert child.name == END_SITE_NAME
        assert child.kind is JointKind.JOINT
        assert child.channels == [Channel.YROTATION]
        assert data.total_channels == count_channels(data.skeleton) == 2

    def test_blank_lines_and_crlf(self, simple_bvh):
        text = simple_bvh.replace("\n", "\r\n\r\n")
        data = parse(text)
        assert data.total_channels == 9
        assert data.motion_data.frame_count == 1


class TestHierarchyErrors:
    def test_parse_error_is_value_error(self):
        assert issubclass(BVHParseError, ValueError)

    def test_missing_hierarchy(self):
        with pytest.raises(BVHParseError, match="HIERARCHY"):
            parse("ROOT Hip\n{\n}\nMOTION\nFrames: 0\nFrame Time: 0.1\n")

    def test_empty_document(self):
        with pytest.raises(BVHParseError, match="HIERARCHY"):
            parse("\n\n")

    def test_missing_motion(self):
        with pytest.raises(BVHParseError, match="MOTION"):
            parse("HIERARCHY\n" + ONE_JOINT)

    def test_missing_open_brace(self, make_bvh):
        hierarchy = "ROOT Hip\nOFFSET 0 0 0\nCHANNELS 1 Xrotation\n}"
        with pytest.raises(BVHParseError, match=r"Expected '\{' after 'ROOT Hip', but found: 'OFFSET 0 0 0'"):
            parse(make_bvh(hierarchy, [[0]]))

    def test_end_of_input_after_declaration(self, make_bvh):
        with pytest.raises(BVHParseError, match="Unexpected end of input"):
            parse(make_bvh("ROOT Hip", []))

    def test_first_node_must_be_root(self, make_bvh):
        with pytest.raises(BVHParseError, match="Expected ROOT"):
            parse(make_bvh("JOINT Hip\n{\n}", []))

    def test_missing_joint_name(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nJOINT\n{\n}\n}"
        with pytest.raises(BVHParseError, match="Missing joint name"):
            parse(make_bvh(hierarchy, []))

    def test_multiple_roots_rejected(self, make_bvh):
        hierarchy = ONE_JOINT + ONE_JOINT.replace("Hip", "Hip2")
        with pytest.raises(BVHParseError, match="Multiple ROOT"):
            parse(make_bvh(hierarchy, [[0] * 6]))

    def test_nested_root_rejected(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nROOT Other\n{\n}\n}"
        with pytest.raises(BVHParseError, match="Multiple ROOT"):
            parse(make_bvh(hierarchy, []))

    def test_unknown_channel(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nCHANNELS 1 Wrotation\n}"
        with pytest.raises(BVHParseError, match="Unknown channel 'Wrotation'"):
            parse(make_bvh(hierarchy, [[0]]))

    def test_channel_count_mismatch(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nCHANNELS 3 Xrotation Yrotation\n}"
        with pytest.raises(BVHParseError, match="declares 3 channels but lists 2"):
            parse(make_bvh(hierarchy, [[0, 0]]))

    def test_bad_offset(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nOFFSET 0 zero 0\n}"
        with pytest.raises(BVHParseError, match="Invalid OFFSET"):
            parse(make_bvh(hierarchy, []))

    def test_end_site_channels_rejected(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nEnd Site\n{\nCHANNELS 1 Xrotation\n}\n}"
        with pytest.raises(BVHParseError, match="End Site cannot have CHANNELS"):
            parse(make_bvh(hierarchy, [[0]]))

    def test_joint_inside_end_site_rejected(self, make_bvh):
        hierarchy = (
            "ROOT Hip\n{\nCHANNELS 3 Xposition Yposition Zposition\n"
            "End Site\n{\nOFFSET 0 5 0\nJOINT Ghost\n{\nCHANNELS 1 Xrotation\n}\n}\n}"
        )
        with pytest.raises(BVHParseError, match="End Site cannot have child nodes"):
            parse(make_bvh(hierarchy, [[0, 0, 0, 0]]))

    def test_end_site_inside_end_site_rejected(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nCHANNELS 1 Xrotation\nEnd Site\n{\nEnd Site\n{\n}\n}\n}"
        with pytest.raises(BVHParseError, match="End Site cannot have child nodes"):
            parse(make_bvh(hierarchy, [[0]]))

    def test_duplicate_channels_rejected(self, make_bvh):
        hierarchy = "ROOT Hip\n{\nCHANNELS 1 Xrotation\nCHANNELS 1 Yrotation\n}"
        with pytest.raises(BVHParseError, match="Duplicate CHANNELS for joint 'Hip'"):
            parse(make_bvh(hierarchy, [[0, 0]]))


# ---------------------------------------------------------------------------
# Motion
# ---------------------------------------------------------------------------

class TestMotion:
    def test_frame_time_and_count(self, humanoid):
        motion = humanoid.motion_data
        assert motion.frame_count == 2
        assert motion.declared_frame_count == 2
        assert motion.frame_time == pytest.approx(0.0333333)
        assert motion.fps == pytest.approx(30.0, rel=1e-5)
        assert humanoid.fps == motion.fps
        assert humanoid.frame_count == 2
        assert humanoid.duration == pytest.approx(2 * 0.0333333)

    def test_frame_values(self, humanoid):
        frames = humanoid.motion_data.frames
        assert frames.shape == (2, 30)
        assert frames[0, :3].tolist() == [0.0, 90.0, 0.0]
        assert frames[1, :3].tolist() == [5.0, 90.0, 0.0]

    def test_partial_motion_is_tolerated(self, make_bvh, caplog):
        text = make_bvh(ONE_JOINT, [[i, 0, 0] for i in range(4)], declared=10)
        with caplog.at_level(logging.WARNING, logger="bvh_sdk_python"):
            data = parse(text)
        assert data.motion_data.frame_count == 4
        assert data.motion_data.declared_frame_count == 10
        assert data.motion_data.truncated
        assert "Expected 10 frames but only found 4 frames" in caplog.text

    def test_extra_frame_lines_ignored(self, make_bvh):
        text = make_bvh(ONE_JOINT, [[i, 0, 0] for i in range(5)], declared=3)
        data = parse(text)
        assert data.motion_data.frame_count == 3
        assert not data.motion_data.truncated

    def test_zero_frames(self, make_bvh):
        data = parse(make_bvh(ONE_JOINT, []))
        assert data.motion_data.frame_count == 0
        assert data.motion_data.frames.shape == (0, 3)

    def test_non_numeric_token_becomes_nan(self, make_bvh, caplog):
        text = make_bvh(ONE_JOINT, ["1 abc 3"])
        with caplog.at_level(logging.WARNING, logger="bvh_sdk_python"):
            data = parse(text)
        frame = data.motion_data.frames[0]
        assert frame[0] == 1.0
        assert math.isnan(frame[1])
        assert frame[2] == 3.0
        assert "non-numeric" in caplog.text

    def test_scientific_frame_time(self, make_bvh):
        data = parse(make_bvh(ONE_JOINT, [[0, 0, 0]], frame_time="8.333333e-03"))
        assert data.frame_time == pytest.approx(0.008333333)


class TestMotionErrors:
    def test_bad_frames_line(self):
        text = "HIERARCHY\n" + ONE_JOINT + "MOTION\nFrames 2\nFrame Time: 0.1\n0 0 0\n"
        with pytest.raises(BVHParseError, match="invalid Frames line"):
            parse(text)

    def test_bad_frame_time_line(self):
        text = "HIERARCHY\n" + ONE_JOINT + "MOTION\nFrames: 1\nFrameTime 0.1\n0 0 0\n"
        with pytest.raises(BVHParseError, match="invalid Frame Time line"):
            parse(text)

    def test_missing_frames_line(self):
        with pytest.raises(BVHParseError, match="MOTION section"):
            parse("HIERARCHY\n" + ONE_JOINT + "MOTION\n")

    def test_missing_frame_time_line(self):
        with pytest.raises(BVHParseError, match="after Frames line"):
            parse("HIERARCHY\n" + ONE_JOINT + "MOTION\nFrames: 1\n")

    def test_zero_frame_time(self, make_bvh):
        with pytest.raises(BVHParseError, match="must be positive"):
            parse(make_bvh(ONE_JOINT, [[0, 0, 0]], frame_time=0))

    def test_frame_width_mismatch(self, make_bvh):
        with pytest.raises(BVHParseError, match="has 2 values, expected 3"):
            parse(make_bvh(ONE_JOINT, [[0, 0]]))


class TestParseFile:
    def test_parse_file(self, tmp_path, simple_bvh):
        path = tmp_path / "simple.bvh"
        path.write_text(simple_bvh)
        data = parse_file(path)
        assert data.skeleton.name == "Hip"
        assert data.total_channels == 9

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_file(tmp_path / "missing.bvh")
