"""
BVH parser - reads the HIERARCHY and MOTION sections of a BVH document.

Example usage:
    from bvh_sdk_python.parser import parse_file

    data = parse_file("motion.bvh")
    print(f"{data.frame_count} frames, {data.total_channels} channels, {data.fps:.1f} FPS")
"""

from .bvh_parser import BVHParseError, parse, parse_file, parse_hierarchy, parse_motion

__all__ = ["BVHParseError", "parse", "parse_file", "parse_hierarchy", "parse_motion"]
