"""Tests for shanshan.core.program – instructions and the program buffer."""

from __future__ import annotations

import pytest

from shanshan.core.errors import LockedWhileRunning
from shanshan.core.program import Instruction, Program, ProgramBuffer

from conftest import ExplodingFeedback, RecordingFeedback


# ---------------------------------------------------------------------------
# Instruction
# ---------------------------------------------------------------------------

class TestInstruction:
    def test_vectors(self):
        assert Instruction.UP.vector == (0, -1)
        assert Instruction.DOWN.vector == (0, 1)
        assert Instruction.LEFT.vector == (-1, 0)
        assert Instruction.RIGHT.vector == (1, 0)


# ---------------------------------------------------------------------------
# Program snapshot
# ---------------------------------------------------------------------------

class TestProgram:
    def test_empty(self):
        p = Program("level1")
        assert p.is_empty()
        assert len(p) == 0

    def test_frozen(self):
        p = Program("level1", (Instruction.UP,))
        with pytest.raises(AttributeError):
            p.instructions = ()  # type: ignore[misc]


# ---------------------------------------------------------------------------
# ProgramBuffer
# ---------------------------------------------------------------------------

class TestProgramBuffer:
    def test_starts_empty(self):
        buf = ProgramBuffer("level1")
        assert len(buf) == 0
        assert buf.snapshot() == Program("level1", ())
        assert not buf.is_locked

    def test_append_in_order(self):
        buf = ProgramBuffer("level1")
        buf.append(Instruction.RIGHT)
        buf.append(Instruction.DOWN)
        assert buf.snapshot().instructions == (Instruction.RIGHT, Instruction.DOWN)

    def test_append_rejects_non_instruction(self):
        buf = ProgramBuffer("level1")
        with pytest.raises(TypeError):
            buf.append("UP")  # type: ignore[arg-type]
        assert len(buf) == 0

    def test_clear(self):
        buf = ProgramBuffer("level1")
        buf.append(Instruction.UP)
        buf.clear()
        assert len(buf) == 0

    def test_snapshot_not_affected_by_later_appends(self):
        buf = ProgramBuffer("level1")
        buf.append(Instruction.UP)
        snap = buf.snapshot()
        buf.append(Instruction.DOWN)
        assert snap.instructions == (Instruction.UP,)
        assert snap.level_key == "level1"

    def test_notifies_feedback(self):
        fb = RecordingFeedback()
        buf = ProgramBuffer("level1", fb)
        buf.append(Instruction.LEFT)
        buf.clear()
        assert fb.events == [("added", Instruction.LEFT), ("cleared",)]

    def test_failing_feedback_does_not_change_buffer(self):
        buf = ProgramBuffer("level1", ExplodingFeedback())
        buf.append(Instruction.LEFT)
        assert len(buf) == 1
        buf.clear()
        assert len(buf) == 0


class TestProgramBufferLocking:
    def test_append_while_locked(self):
        buf = ProgramBuffer("level1")
        buf.append(Instruction.UP)
        buf._acquire()
        with pytest.raises(LockedWhileRunning):
            buf.append(Instruction.DOWN)
        assert buf.snapshot().instructions == (Instruction.UP,)

    def test_clear_while_locked(self):
        buf = ProgramBuffer("level1")
        buf.append(Instruction.UP)
        buf._acquire()
        with pytest.raises(LockedWhileRunning):
            buf.clear()
        assert len(buf) == 1

    def test_locked_buffer_sends_no_feedback(self):
        fb = RecordingFeedback()
        buf = ProgramBuffer("level1", fb)
        buf._acquire()
        with pytest.raises(LockedWhileRunning):
            buf.append(Instruction.UP)
        assert fb.events == []

    def test_double_acquire(self):
        buf = ProgramBuffer("level1")
        buf._acquire()
        with pytest.raises(LockedWhileRunning):
            buf._acquire()

    def test_release_allows_editing(self):
        buf = ProgramBuffer("level1")
        buf._acquire()
        buf._release()
        buf.append(Instruction.UP)
        assert len(buf) == 1
