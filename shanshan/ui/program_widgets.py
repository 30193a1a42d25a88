"""Game screen widgets: the obstacle grid and the program strip."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, QRectF
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from shanshan.core.levels import Level, Position
from shanshan.core.program import Instruction
from shanshan.ui.colors import GameColors, blend_hex

ARROWS = {
    Instruction.UP: "↑",
    Instruction.DOWN: "↓",
    Instruction.LEFT: "←",
    Instruction.RIGHT: "→",
}


class GameGridWidget(QWidget):
    """Square grid with the avatar, the trophy goal and grey obstacle blocks."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._level: Optional[Level] = None
        self._avatar: Optional[Position] = None
        self._crashed = False
        self.setMinimumSize(240, 240)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

    def set_level(self, level: Level) -> None:
        self._level = level
        self._avatar = level.start
        self._crashed = False
        self.update()

    def set_avatar(self, position: Position, crashed: bool = False) -> None:
        self._avatar = position
        self._crashed = crashed
        self.update()

    def paintEvent(self, event) -> None:
        """Paint the frame, then every cell with its avatar/goal/obstacle content."""
        super().paintEvent(event)
        if self._level is None:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        n = self._level.grid_size
        side = min(self.width(), self.height())
        pad = max(4, side // 40)
        gap = max(2, side // 80)
        left = (self.width() - side) / 2
        top = (self.height() - side) / 2

        painter.setBrush(QColor(GameColors.PINK_LIGHT))
        painter.setPen(QPen(QColor(GameColors.GRID_FRAME), 4))
        painter.drawRoundedRect(QRectF(left, top, side, side), 18, 18)

        cell = (side - 2 * pad - (n - 1) * gap) / n
        for y in range(n):
            for x in range(n):
                pos = Position(x, y)
                rect = QRectF(left + pad + x * (cell + gap), top + pad + y * (cell + gap), cell, cell)
                self._paint_cell(painter, rect, pos)

    def _paint_cell(self, painter: QPainter, rect: QRectF, pos: Position) -> None:
        level = self._level
        is_avatar = pos == self._avatar
        is_goal = pos == level.goal
        radius = max(4.0, rect.width() / 6)

        if is_avatar:
            fill = GameColors.CRASH if self._crashed else GameColors.AVATAR
            painter.setBrush(QColor(fill))
            painter.setPen(QPen(QColor(fill), 1))
        elif is_goal:
            painter.setBrush(QColor(GameColors.GOAL_BG))
            painter.setPen(QPen(QColor(GameColors.GOAL_RING), 3))
        else:
            painter.setBrush(QColor(GameColors.CELL_BG))
            painter.setPen(QPen(QColor(GameColors.CELL_BORDER), 1))
        painter.drawRoundedRect(rect, radius, radius)

        if is_avatar:
            text, color = "🤖", "#ffffff"
        elif is_goal:
            text, color = "🏆", GameColors.YELLOW
        elif level.is_blocked(pos):
            inner = rect.adjusted(rect.width() * 0.2, rect.height() * 0.2, -rect.width() * 0.2, -rect.height() * 0.2)
            painter.setBrush(QColor(GameColors.OBSTACLE))
            painter.setPen(QPen(QColor(blend_hex(GameColors.OBSTACLE, "#000000", 0.25)), 1))
            painter.drawRoundedRect(inner, radius / 2, radius / 2)
            return
        else:
            return
        font = painter.font()
        font.setPixelSize(max(10, int(rect.height() * 0.5)))
        painter.setFont(font)
        painter.setPen(QColor(color))
        painter.drawText(rect, Qt.AlignCenter, text)


class ProgramStripWidget(QWidget):
    """Row of arrow boxes: executed (faded), current (purple), upcoming (orange)."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._instructions: list[Instruction] = []
        self._current_index: int = -1
        self.setFixedHeight(60)
        self.setMinimumWidth(200)

    def set_instructions(self, instructions) -> None:
        self._instructions = list(instructions)
        self._current_index = -1
        self.update()

    def set_current(self, index: int) -> None:
        """Highlight the step being executed; -1 clears the highlight."""
        self._current_index = max(-1, min(index, len(self._instructions)))
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if not self._instructions:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        box_size = 40
        spacing = 6
        per_row = max(1, (self.width() + spacing) // (box_size + spacing))
        shown = self._instructions[-per_row:]
        offset = len(self._instructions) - len(shown)
        y = (self.height() - box_size) // 2
        for i, instruction in enumerate(shown):
            idx = i + offset
            x = i * (box_size + spacing)
            if 0 <= self._current_index and idx < self._current_index:
                fill = blend_hex(GameColors.ORANGE, "#ffffff", 0.6)
            elif idx == self._current_index:
                fill = GameColors.PRIMARY
            else:
                fill = GameColors.ORANGE
            painter.setBrush(QColor(fill))
            painter.setPen(Qt.NoPen)
            painter.drawRoundedRect(x, y, box_size, box_size, 8, 8)
            font = painter.font()
            font.setPointSize(16)
            font.setBold(True)
            painter.setFont(font)
            painter.setPen(QColor("#ffffff"))
            painter.drawText(x, y, box_size, box_size, Qt.AlignCenter, ARROWS[instruction])
