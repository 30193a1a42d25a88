from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeyEvent
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from shanshan.config import GameSettings
from shanshan.core.engine import ProgramRun, RunOutcome, RunStatus
from shanshan.core.errors import EmptyProgram, GameError
from shanshan.core.levels import Position
from shanshan.core.program import Instruction
from shanshan.core.progression import ProgressionController, ProgressionPhase
from shanshan.ui.colors import GameColors, blend_hex
from shanshan.ui.feedback import QtFeedbackChannel
from shanshan.ui.models import build_level_states
from shanshan.ui.narration import EMPTY_PROGRAM_PHRASE, START_GAME_PHRASE, STORY_TEXT, Narrator
from shanshan.ui.program_widgets import ARROWS, GameGridWidget, ProgramStripWidget
from shanshan.ui.sounds import SoundBank

logger = logging.getLogger(__name__)

CRASH_RESET_DELAY_MS = 1000
MISS_RESET_DELAY_MS = 1500

KEY_INSTRUCTIONS = {
    Qt.Key_Up: Instruction.UP,
    Qt.Key_Down: Instruction.DOWN,
    Qt.Key_Left: Instruction.LEFT,
    Qt.Key_Right: Instruction.RIGHT,
}


def _pill_button(text: str, color: str, font_px: int = 22) -> QPushButton:
    button = QPushButton(text)
    button.setCursor(Qt.PointingHandCursor)
    shadow = blend_hex(color, "#000000", 0.3)
    button.setStyleSheet(
        f"""
        QPushButton {{
            background: {color};
            color: white;
            font-size: {font_px}px;
            font-weight: 800;
            border: none;
            border-bottom: 6px solid {shadow};
            border-radius: 24px;
            padding: 12px 28px;
        }}
        QPushButton:hover {{ background: {blend_hex(color, "#ffffff", 0.15)}; }}
        QPushButton:disabled {{ background: {GameColors.LOCKED_BG}; color: {GameColors.TEXT_MUTED}; border-bottom-color: #d1d5db; }}
        """
    )
    return button


class MainWindow(QMainWindow):
    """Main window with home, story, level-select, game and reward screens.

    The window drives runs one step per timer tick so the learner can watch
    the robot walk; everything that decides the outcome lives in the
    progression controller.
    """

    def __init__(
        self,
        controller: ProgressionController,
        feedback: QtFeedbackChannel,
        narrator: Narrator,
        sounds: SoundBank,
        settings: GameSettings,
    ) -> None:
        super().__init__()
        self._controller = controller
        self._feedback = feedback
        self._narrator = narrator
        self._sounds = sounds
        self._settings = settings
        self._run: Optional[ProgramRun] = None

        self._step_timer = QTimer(self)
        self._step_timer.setInterval(settings.step_delay_ms)
        self._step_timer.timeout.connect(self._advance_run)

        self._stack: Optional[QStackedWidget] = None
        self._home_screen: Optional[QWidget] = None
        self._story_screen: Optional[QWidget] = None
        self._select_screen: Optional[QWidget] = None
        self._game_screen: Optional[QWidget] = None
        self._reward_screen: Optional[QWidget] = None
        self._select_grid: Optional[QGridLayout] = None
        self._level_title: Optional[QLabel] = None
        self._status_label: Optional[QLabel] = None
        self._grid_widget: Optional[GameGridWidget] = None
        self._strip_widget: Optional[ProgramStripWidget] = None
        self._run_button: Optional[QPushButton] = None
        self._reset_button: Optional[QPushButton] = None
        self._next_button: Optional[QPushButton] = None
        self._arrow_buttons: list[QPushButton] = []

        self._feedback.program_changed.connect(self._refresh_program)
        self._feedback.step_started.connect(self._on_step_started)
        self._feedback.step_landed.connect(self._on_step_landed)
        self._feedback.crashed.connect(self._on_crashed)

        self.setWindowTitle("闪闪编程")
        self._build_ui()
        self._show(self._home_screen)

    def _build_ui(self) -> None:
        self._stack = QStackedWidget()
        self._stack.setStyleSheet(
            f"QStackedWidget > QWidget {{ background: qlineargradient(x1:0, y1:0, x2:0, y2:1,"
            f" stop:0 {GameColors.BG_TOP}, stop:1 {GameColors.BG_BOTTOM}); }}"
        )
        self._home_screen = self._build_home_screen()
        self._story_screen = self._build_story_screen()
        self._select_screen = self._build_select_screen()
        self._game_screen = self._build_game_screen()
        self._reward_screen = self._build_reward_screen()
        for screen in (
            self._home_screen,
            self._story_screen,
            self._select_screen,
            self._game_screen,
            self._reward_screen,
        ):
            self._stack.addWidget(screen)
        self.setCentralWidget(self._stack)

    def _build_home_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setAlignment(Qt.AlignCenter)
        layout.setSpacing(24)

        title = QLabel("🤖\n闪闪编程")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet(f"font-size: 56px; font-weight: 900; color: {GameColors.PRIMARY};")
        subtitle = QLabel("学习和电脑说话！")
        subtitle.setAlignment(Qt.AlignCenter)
        subtitle.setStyleSheet(f"font-size: 22px; color: {GameColors.TEXT_MUTED};")

        story = _pill_button("▶ 开始故事", GameColors.PINK, 28)
        story.clicked.connect(self._open_story)
        select = _pill_button("▦ 选择关卡", GameColors.YELLOW)
        select.clicked.connect(self._open_level_select)

        layout.addWidget(title)
        layout.addWidget(subtitle)
        layout.addWidget(story, 0, Qt.AlignCenter)
        layout.addWidget(select, 0, Qt.AlignCenter)
        return screen

    def _build_story_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setAlignment(Qt.AlignCenter)
        layout.setSpacing(24)

        heading = QLabel("什么是程序？")
        heading.setAlignment(Qt.AlignCenter)
        heading.setStyleSheet(f"font-size: 32px; font-weight: 800; color: {GameColors.PRIMARY};")
        text = QLabel(STORY_TEXT)
        text.setWordWrap(True)
        text.setAlignment(Qt.AlignCenter)
        text.setMaximumWidth(640)
        text.setStyleSheet(f"font-size: 24px; color: {GameColors.TEXT_PRIMARY};")

        row = QHBoxLayout()
        home = _pill_button("⌂", GameColors.OBSTACLE)
        home.clicked.connect(self._go_home)
        speak = _pill_button("🔊", GameColors.YELLOW)
        speak.clicked.connect(lambda: self._narrator.say(STORY_TEXT))
        try_it = _pill_button("▶ 试一试！", GameColors.PRIMARY)
        try_it.clicked.connect(self._start_from_story)
        row.addWidget(home)
        row.addWidget(speak)
        row.addWidget(try_it)

        layout.addWidget(heading)
        layout.addWidget(text, 0, Qt.AlignCenter)
        layout.addLayout(row)
        return screen

    def _build_select_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        header = QHBoxLayout()
        home = _pill_button("⌂ 主页", GameColors.OBSTACLE, 18)
        home.clicked.connect(self._go_home)
        heading = QLabel("选择关卡")
        heading.setStyleSheet(f"font-size: 30px; font-weight: 800; color: {GameColors.PRIMARY};")
        header.addWidget(home)
        header.addStretch(1)
        header.addWidget(heading)
        header.addStretch(1)
        layout.addLayout(header)

        holder = QWidget()
        self._select_grid = QGridLayout(holder)
        self._select_grid.setSpacing(12)
        layout.addWidget(holder, 1)
        return screen

    def _build_game_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)

        header = QHBoxLayout()
        levels = _pill_button("▦ 关卡", GameColors.PRIMARY_LIGHT, 18)
        levels.clicked.connect(self._open_level_select)
        self._level_title = QLabel("")
        self._level_title.setStyleSheet(f"font-size: 28px; font-weight: 800; color: {GameColors.PRIMARY};")
        home = _pill_button("⌂", GameColors.OBSTACLE, 18)
        home.clicked.connect(self._go_home)
        header.addWidget(levels)
        header.addStretch(1)
        header.addWidget(self._level_title)
        header.addStretch(1)
        header.addWidget(home)
        layout.addLayout(header)

        body = QHBoxLayout()
        self._grid_widget = GameGridWidget()
        body.addWidget(self._grid_widget, 3)

        controls = QVBoxLayout()
        self._strip_widget = ProgramStripWidget()
        controls.addWidget(self._strip_widget)

        pad = QGridLayout()
        for instruction, (row, col) in (
            (Instruction.UP, (0, 1)),
            (Instruction.LEFT, (1, 0)),
            (Instruction.RIGHT, (1, 2)),
            (Instruction.DOWN, (2, 1)),
        ):
            button = _pill_button(ARROWS[instruction], GameColors.ORANGE, 30)
            button.clicked.connect(lambda _=False, i=instruction: self._add_instruction(i))
            pad.addWidget(button, row, col)
            self._arrow_buttons.append(button)
        controls.addLayout(pad)

        actions = QHBoxLayout()
        self._reset_button = _pill_button("↺", GameColors.PINK)
        self._reset_button.clicked.connect(self._clear_program)
        self._run_button = _pill_button("▶ 运行程序！", GameColors.GREEN)
        self._run_button.clicked.connect(self._run_program)
        actions.addWidget(self._reset_button)
        actions.addWidget(self._run_button, 1)
        controls.addLayout(actions)

        self._status_label = QLabel("")
        self._status_label.setAlignment(Qt.AlignCenter)
        self._status_label.setStyleSheet(f"font-size: 22px; color: {GameColors.TEXT_PRIMARY};")
        controls.addWidget(self._status_label)

        self._next_button = _pill_button("下一关 ➜", GameColors.PRIMARY)
        self._next_button.clicked.connect(self._next_level)
        self._next_button.setVisible(False)
        controls.addWidget(self._next_button)
        controls.addStretch(1)

        body.addLayout(controls, 2)
        layout.addLayout(body, 1)
        return screen

    def _build_reward_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setAlignment(Qt.AlignCenter)
        trophy = QLabel("🏆🐉✨")
        trophy.setAlignment(Qt.AlignCenter)
        trophy.setStyleSheet("font-size: 96px;")
        text = QLabel("你是超级程序员！")
        text.setAlignment(Qt.AlignCenter)
        text.setStyleSheet(f"font-size: 36px; font-weight: 900; color: {GameColors.PRIMARY};")
        again = _pill_button("再玩一次", GameColors.PRIMARY)
        again.clicked.connect(self._play_again)
        layout.addWidget(trophy)
        layout.addWidget(text)
        layout.addWidget(again, 0, Qt.AlignCenter)
        return screen

    # --- navigation

    def _show(self, screen: Optional[QWidget]) -> None:
        if self._stack is not None and screen is not None:
            self._stack.setCurrentWidget(screen)

    def _go_home(self) -> None:
        self._sounds.play("click")
        self._cancel_run()
        self._show(self._home_screen)

    def _open_story(self) -> None:
        self._sounds.play("click")
        self._show(self._story_screen)
        self._narrator.say(STORY_TEXT)

    def _start_from_story(self) -> None:
        """Full restart from the home flow: progress goes back to level 1."""
        self._sounds.play("click")
        self._cancel_run()
        self._controller.restart_session()
        self._open_game()
        self._narrator.say(START_GAME_PHRASE)

    def _open_level_select(self) -> None:
        self._sounds.play("click")
        self._cancel_run()
        self._refresh_level_select()
        self._show(self._select_screen)

    def _refresh_level_select(self) -> None:
        """Rebuild the level cards with current unlock state."""
        if self._select_grid is None:
            return
        while self._select_grid.count():
            item = self._select_grid.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)
                w.deleteLater()

        for state in build_level_states(self._controller):
            label = f"{state.index + 1}\n" + ("★" * state.stars if state.unlocked else "🔒")
            color = GameColors.PINK if state.is_current else GameColors.PRIMARY_LIGHT
            card = _pill_button(label, color, 20)
            card.setEnabled(state.unlocked)
            card.setMinimumSize(96, 96)
            card.clicked.connect(lambda _=False, idx=state.index: self._select_level(idx))
            self._select_grid.addWidget(card, state.index // 6, state.index % 6)

    def _select_level(self, index: int) -> None:
        self._sounds.play("click")
        self._controller.select(index)
        self._open_game()

    def _open_game(self) -> None:
        level = self._controller.active_level
        if self._level_title is not None:
            self._level_title.setText(f"第 {self._controller.active_level_index + 1} 关 · {level.name}")
        if self._grid_widget is not None:
            self._grid_widget.set_level(level)
        if self._status_label is not None:
            self._status_label.setText("")
        if self._next_button is not None:
            self._next_button.setVisible(False)
        self._refresh_program()
        self._set_controls_enabled(True)
        self._show(self._game_screen)

    def _next_level(self) -> None:
        self._sounds.play("click")
        self._controller.advance()
        self._open_game()

    def _play_again(self) -> None:
        self._sounds.play("click")
        self._controller.select(0)
        self._show(self._home_screen)

    # --- authoring

    def _add_instruction(self, instruction: Instruction) -> None:
        if self._run is not None or not self._controller.accepts_edits:
            return
        try:
            self._controller.buffer.append(instruction)
        except GameError as e:
            logger.warning("Could not add %s: %s", instruction.name, e)

    def _clear_program(self) -> None:
        if self._run is not None or not self._controller.accepts_edits:
            return
        try:
            self._controller.clear_program()
        except GameError as e:
            logger.warning("Could not clear program: %s", e)
            return
        if self._grid_widget is not None:
            self._grid_widget.set_avatar(self._controller.avatar_position)
        if self._status_label is not None:
            self._status_label.setText("")

    def _refresh_program(self) -> None:
        if self._strip_widget is not None:
            self._strip_widget.set_instructions(self._controller.buffer.snapshot().instructions)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Arrow keys add blocks, Enter runs, Backspace clears (game screen only)."""
        if self._stack is None or self._stack.currentWidget() is not self._game_screen:
            super().keyPressEvent(event)
            return
        key = event.key()
        if key in KEY_INSTRUCTIONS:
            self._add_instruction(KEY_INSTRUCTIONS[key])
        elif key in (Qt.Key_Return, Qt.Key_Enter):
            self._run_program()
        elif key == Qt.Key_Backspace:
            self._clear_program()
        else:
            super().keyPressEvent(event)

    # --- running

    def _set_controls_enabled(self, enabled: bool) -> None:
        for button in [*self._arrow_buttons, self._run_button, self._reset_button]:
            if button is not None:
                button.setEnabled(enabled)

    def _run_program(self) -> None:
        if self._run is not None or not self._controller.accepts_edits:
            return
        try:
            run = self._controller.begin_run()
        except EmptyProgram:
            self._narrator.say(EMPTY_PROGRAM_PHRASE)
            return
        except GameError as e:
            logger.warning("Run rejected: %s", e)
            return
        self._sounds.play("click")
        self._run = run
        run.add_listener(self._on_run_finished)
        if self._grid_widget is not None:
            self._grid_widget.set_avatar(run.state.current_pos)
        if self._status_label is not None:
            self._status_label.setText("")
        self._set_controls_enabled(False)
        self._step_timer.start()

    def _advance_run(self) -> None:
        if self._run is None:
            self._step_timer.stop()
            return
        self._run.step()

    def _cancel_run(self) -> None:
        self._step_timer.stop()
        if self._run is not None:
            self._run.cancel()

    def _on_step_started(self, step_index: int) -> None:
        if self._strip_widget is not None:
            self._strip_widget.set_current(step_index)

    def _on_step_landed(self, position: Position) -> None:
        if self._grid_widget is not None:
            self._grid_widget.set_avatar(position)

    def _on_crashed(self, step_index: int, position: Position) -> None:
        if self._grid_widget is not None:
            self._grid_widget.set_avatar(position, crashed=True)
        if self._status_label is not None:
            self._status_label.setText(f"第 {step_index + 1} 步撞到了！")

    def _on_run_finished(self, outcome: RunOutcome) -> None:
        self._step_timer.stop()
        self._run = None
        self._set_controls_enabled(True)
        if self._strip_widget is not None:
            self._strip_widget.set_current(-1)

        if outcome.status is RunStatus.ABORTED:
            return
        if outcome.status is RunStatus.SUCCEEDED:
            phase = self._controller.current_state().phase
            if phase is ProgressionPhase.ALL_LEVELS_CLEARED:
                self._show(self._reward_screen)
                return
            self._set_controls_enabled(False)
            if self._status_label is not None:
                self._status_label.setText("🎉 成功！")
            if self._next_button is not None:
                self._next_button.setVisible(True)
            return

        if outcome.status is RunStatus.FINISHED_NO_GOAL and self._status_label is not None:
            self._status_label.setText("差点就到了！")
        delay = CRASH_RESET_DELAY_MS if outcome.status is RunStatus.CRASHED else MISS_RESET_DELAY_MS
        QTimer.singleShot(delay, self._show_avatar_at_start)

    def _show_avatar_at_start(self) -> None:
        if self._run is None and self._grid_widget is not None:
            self._grid_widget.set_avatar(self._controller.avatar_position)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop any running program and drop the sound files when the window closes."""
        self._cancel_run()
        self._sounds.close()
        super().closeEvent(event)
