"""Drawing tools."""

from .segment_tool import SegmentTool

__all__ = ["SegmentTool"]
