"""Custom 16x16 mouse cursors for the slice views.

Bitmaps are drawn as strings: '#' is black, 'o' is white and '.' is
transparent.
"""

from typing import Dict, List, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QCursor, QImage, QPixmap

_CONTRAST = [
    "................",
    ".....######.....",
    "...##oooooo##...",
    "..#oooooo####...",
    ".#ooooooo#####..",
    ".#ooooooo######.",
    "#oooooooo######.",
    "#oooooooo#######",
    "#oooooooo#######",
    "#oooooooo######.",
    ".#ooooooo######.",
    ".#ooooooo#####..",
    "..#oooooo####...",
    "...##oooo###....",
    ".....######.....",
    "................",
]

_PENCIL = [
    "..........###...",
    ".........#ooo#..",
    "........#ooooo#.",
    ".......#o#ooo#..",
    "......#o#ooo#...",
    ".....#o#ooo#....",
    "....#o#ooo#.....",
    "...#o#ooo#......",
    "..#o#ooo#.......",
    ".#o#ooo#........",
    ".#oooo#.........",
    "#ooo##..........",
    "#o##............",
    "##..............",
    "#...............",
    "................",
]

_ERASER = [
    "........#####...",
    ".......#ooooo#..",
    "......#ooooooo#.",
    ".....#ooooooo#..",
    "....#ooooooo#...",
    "...#ooooooo#....",
    "..#######o#.....",
    ".#ooooo#o#......",
    "#ooooo#o#.......",
    "#oooo#o#........",
    "#ooo#o#.........",
    "#oo#o#..........",
    "##o#o#..........",
    "##o##...........",
    "####............",
    "................",
]

_CROSS = [
    ".......##.......",
    ".......#o#......",
    ".......#o#......",
    ".......#o#......",
    ".......#o#......",
    ".......#o#......",
    ".......#o#......",
    "#######...######",
    "#oooooo...ooooo#",
    "#######...######",
    ".......#o#......",
    ".......#o#......",
    ".......#o#......",
    ".......#o#......",
    ".......#o#......",
    ".......##.......",
]

# name -> (bitmap rows, hotspot x, hotspot y)
_CURSORS: Dict[str, Tuple[List[str], int, int]] = {
    "contrast": (_CONTRAST, 7, 7),
    "pencil": (_PENCIL, 0, 15),
    "eraser": (_ERASER, 0, 15),
    "cross": (_CROSS, 7, 7),
}

_PIXEL_COLORS = {
    "#": QColor(0, 0, 0, 255),
    "o": QColor(255, 255, 255, 255),
    ".": QColor(0, 0, 0, 0),
}


def bitmap_to_image(rows: List[str]) -> QImage:
    """Render a string bitmap into an ARGB image."""
    height, width = len(rows), len(rows[0])
    image = QImage(width, height, QImage.Format_ARGB32)
    image.fill(Qt.transparent)
    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            image.setPixelColor(x, y, _PIXEL_COLORS[char])
    return image


def make_cursor(name: str) -> QCursor:
    """Create one of the named cursors ('contrast', 'pencil', 'eraser', 'cross')."""
    if name not in _CURSORS:
        raise ValueError(f"Unknown cursor: {name}")
    rows, hot_x, hot_y = _CURSORS[name]
    return QCursor(QPixmap.fromImage(bitmap_to_image(rows)), hot_x, hot_y)


def cursor_names() -> List[str]:
    return list(_CURSORS)
