"""
BVH text parser.

Turns the HIERARCHY section into a Joint tree and the MOTION section into a
MotionData block. The whole document is parsed in one pass; any structural
problem raises BVHParseError and nothing partial is returned.

Data-quality problems inside the motion block (fewer frame lines than
declared, non-numeric tokens) are not fatal. They are reported as warnings on
the module logger and the data that could be read is kept.
"""

import logging
import math
import re

import numpy as np

from ..skeleton.skeleton import (
    END_SITE_NAME,
    BVHData,
    Channel,
    Joint,
    JointKind,
    MotionData,
)


log = logging.getLogger(__name__)

FRAMES_RE = re.compile(r"Frames:\s*(\d+)")
FRAME_TIME_RE = re.compile(r"Frame Time:\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


class BVHParseError(ValueError):
    """Raised when a BVH document is structurally invalid."""


def _split_lines(text):
    """Get (line number, stripped line) pairs, blank lines dropped."""
    return [
        (lineno, line.strip())
        for lineno, line in enumerate(text.splitlines(), start=1)
        if line.strip()
    ]


def _keyword(line):
    return line.split(None, 1)[0]


def _is_end_site(line):
    return line.split()[:2] == ["End", "Site"]


def _parse_offset(line, lineno):
    parts = line.split()
    if len(parts) != 4:
        raise BVHParseError(f"OFFSET needs 3 values at line {lineno}: {line!r}")
    try:
        return np.array([float(v) for v in parts[1:]])
    except ValueError as e:
        raise BVHParseError(f"Invalid OFFSET value at line {lineno}: {line!r}") from e


def _parse_channels(line, lineno):
    parts = line.split()
    try:
        count = int(parts[1])
    except (IndexError, ValueError) as e:
        raise BVHParseError(f"Invalid CHANNELS count at line {lineno}: {line!r}") from e

    tokens = parts[2:]
    if len(tokens) != count:
        raise BVHParseError(
            f"CHANNELS declares {count} channels but lists {len(tokens)} at line {lineno}"
        )
    channels = []
    for token in tokens:
        try:
            channels.append(Channel(token))
        except ValueError as e:
            raise BVHParseError(f"Unknown channel {token!r} at line {lineno}") from e
    return channels


def _parse_node(lines, index, kind):
    """
    Parse one node declaration and its body.

    Args:
        lines: (line number, line) pairs of the hierarchy section
        index: Position of the declaration line
        kind: JointKind of the node being declared

    Returns:
        Tuple of (joint, channel total of the subtree, index after the node)
    """
    lineno, line = lines[index]
    if kind is JointKind.END_SITE:
        name = END_SITE_NAME
    else:
        parts = line.split()
        if len(parts) < 2:
            raise BVHParseError(f"Missing joint name after {parts[0]} at line {lineno}")
        name = " ".join(parts[1:])
    index += 1

    if index >= len(lines):
        raise BVHParseError(f"Unexpected end of input after {line!r} at line {lineno}")

    brace_lineno, brace = lines[index]
    if brace != "{":
        raise BVHParseError(
            f"Expected '{{' after {line!r}, but found: {brace!r} at line {brace_lineno}"
        )
    index += 1

    joint = Joint(name=name, kind=kind)
    total_channels = 0
    seen_channels = False

    while index < len(lines) and lines[index][1] != "}":
        lineno, line = lines[index]
        keyword = _keyword(line)

        if kind is JointKind.END_SITE and (keyword in ("JOINT", "ROOT") or _is_end_site(line)):
            raise BVHParseError(f"End Site cannot have child nodes (line {lineno}): {line!r}")

        if keyword == "OFFSET":
            joint.offset = _parse_offset(line, lineno)
            index += 1
        elif keyword == "CHANNELS":
            if kind is JointKind.END_SITE:
                raise BVHParseError(f"End Site cannot have CHANNELS (line {lineno})")
            if seen_channels:
                raise BVHParseError(f"Duplicate CHANNELS for joint {name!r} at line {lineno}")
            seen_channels = True
            joint.channels = _parse_channels(line, lineno)
            total_channels += len(joint.channels)
            index += 1
        elif keyword == "JOINT":
            child, child_channels, index = _parse_node(lines, index, JointKind.JOINT)
            joint.children.append(child)
            total_channels += child_channels
        elif _is_end_site(line):
            child, child_channels, index = _parse_node(lines, index, JointKind.END_SITE)
            joint.children.append(child)
            total_channels += child_channels
        elif keyword == "ROOT":
            raise BVHParseError(f"Multiple ROOT declarations are not supported (line {lineno})")
        else:
            # Unrecognized keywords are skipped
            index += 1

    # A missing closing brace at the end of the section is tolerated
    if index < len(lines):
        index += 1

    return joint, total_channels, index


def parse_hierarchy(lines):
    """
    Parse the lines between HIERARCHY and MOTION into a joint tree.

    Args:
        lines: (line number, line) pairs, blank lines removed

    Returns:
        Tuple of (root joint, total channel count)
    """
    if not lines:
        raise BVHParseError("Empty HIERARCHY section")

    lineno, line = lines[0]
    if _keyword(line) != "ROOT":
        raise BVHParseError(f"Expected ROOT at line {lineno}, but found: {line!r}")

    root, total_channels, index = _parse_node(lines, 0, JointKind.ROOT)

    for lineno, line in lines[index:]:
        if _keyword(line) == "ROOT":
            raise BVHParseError(f"Multiple ROOT declarations are not supported (line {lineno})")

    return root, total_channels


def _parse_value(token):
    try:
        return float(token)
    except ValueError:
        return math.nan


def parse_motion(lines, total_channels):
    """
    Parse the lines after MOTION into a MotionData block.

    Args:
        lines: (line number, line) pairs following the MOTION line
        total_channels: Expected number of values per frame

    Returns:
        MotionData with frames of shape (realized_frames, total_channels)
    """
    if not lines:
        raise BVHParseError("Unexpected end of input in MOTION section")

    lineno, line = lines[0]
    fmatch = FRAMES_RE.match(line)
    if not fmatch:
        raise BVHParseError(f"Invalid MOTION section: missing or invalid Frames line at line {lineno}. Found: {line!r}")
    declared = int(fmatch.group(1))

    if len(lines) < 2:
        raise BVHParseError("Unexpected end of input after Frames line")

    lineno, line = lines[1]
    tmatch = FRAME_TIME_RE.match(line)
    if not tmatch:
        raise BVHParseError(f"Invalid MOTION section: missing or invalid Frame Time line at line {lineno}. Found: {line!r}")
    frame_time = float(tmatch.group(1))
    if frame_time <= 0:
        raise BVHParseError(f"Frame Time must be positive, got {frame_time} at line {lineno}")

    frame_lines = lines[2:2 + declared]
    if len(frame_lines) < declared:
        log.warning("Expected %d frames but only found %d frames", declared, len(frame_lines))

    frames = np.empty((len(frame_lines), total_channels), dtype=np.float64)
    for i, (lineno, line) in enumerate(frame_lines):
        values = [_parse_value(token) for token in line.split()]
        if len(values) != total_channels:
            raise BVHParseError(
                f"Frame {i} at line {lineno} has {len(values)} values, expected {total_channels}"
            )
        frames[i] = values
        if np.isnan(frames[i]).any():
            log.warning("Frame %d (line %d) contains non-numeric values", i, lineno)

    return MotionData(frame_time=frame_time, frames=frames, declared_frame_count=declared)


def parse(text):
    """
    Parse a BVH document.

    Args:
        text: Full BVH file contents

    Returns:
        BVHData with skeleton, motion_data and total_channels.

    Raises:
        BVHParseError: if the document is structurally invalid.
    """
    lines = _split_lines(text)

    if not lines or lines[0][1] != "HIERARCHY":
        found = lines[0][1] if lines else ""
        raise BVHParseError(f"Invalid BVH file: missing HIERARCHY section. Found: {found!r}")

    motion_index = next((i for i, (_, line) in enumerate(lines) if line == "MOTION"), None)
    if motion_index is None:
        raise BVHParseError("Invalid BVH file: missing MOTION section")

    skeleton, total_channels = parse_hierarchy(lines[1:motion_index])
    motion_data = parse_motion(lines[motion_index + 1:], total_channels)

    log.info(
        "BVH loaded: %d frames, %d channels, %.1f FPS",
        motion_data.frame_count, total_channels, motion_data.fps,
    )
    return BVHData(skeleton=skeleton, motion_data=motion_data, total_channels=total_channels)


def parse_file(filename):
    """
    Read and parse a BVH file.

    Args:
        filename: Path to the BVH file

    Returns:
        BVHData for the file contents.
    """
    log.info("Parsing BVH: %s", filename)
    with open(filename, "r") as f:
        text = f.read()
    return parse(text)
