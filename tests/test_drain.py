"""Tests for the drain loop."""

import io
import os
import re
import threading
import time

import pytest

from technicolor.config.parser import parse_rules
from technicolor.config.schema import Rule, RuleSet
from technicolor.core.color import ColorSpec
from technicolor.core.drain import DrainLoop, LoopState
from technicolor.core.matcher import LineColorizer
from technicolor.core.writer import SegmentWriter
from technicolor.errors import CaptureCountError

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def no_sleep(_seconds):
    pass


def make_loop(ruleset, stdout_fd, stderr_fd, color=True, **kwargs):
    out, err = io.BytesIO(), io.BytesIO()
    kwargs.setdefault("sleep", no_sleep)
    loop = DrainLoop(
        colorizer=LineColorizer(ruleset),
        stdout_source=stdout_fd,
        stderr_source=stderr_fd,
        stdout_writer=SegmentWriter(out, color=color),
        stderr_writer=SegmentWriter(err, color=color),
        **kwargs,
    )
    return loop, out, err


class TestDrainLoop:
    """Tests for DrainLoop.run."""

    def test_streams_are_colorized_separately(self, sample_ruleset, pipe_with):
        """Test stdout and stderr lines go to their own sinks in their own colors."""
        loop, out, err = make_loop(
            sample_ruleset,
            pipe_with(b"hello\nERROR: disk full\n"),
            pipe_with(b"oops\n"),
        )

        loop.run()

        assert out.getvalue() == (
            b"\x1b[0;37;40mhello\x1b[0m\n"
            b"\x1b[0;37;40mERROR: \x1b[0m\x1b[1;31;40mdisk full\x1b[0m\n"
        )
        assert err.getvalue() == b"\x1b[0;33;40moops\x1b[0m\n"
        assert loop.state is LoopState.DONE

    def test_partial_line_flushed_raw_once(self, sample_ruleset, pipe_with):
        """Test unterminated trailing data is written uncolored without a newline."""
        loop, out, err = make_loop(sample_ruleset, pipe_with(b"abc\ntail"), pipe_with(b"err tail"))

        stats = loop.run()

        assert out.getvalue() == b"\x1b[0;37;40mabc\x1b[0m\ntail"
        assert err.getvalue() == b"err tail"
        assert stats.stdout.lines == 1
        assert stats.stdout.partial is True
        assert stats.stderr.lines == 0
        assert stats.stderr.partial is True

    def test_empty_streams(self, empty_ruleset, pipe_with):
        """Test two empty streams finish with no output."""
        loop, out, err = make_loop(empty_ruleset, pipe_with(b""), pipe_with(b""))

        stats = loop.run()

        assert out.getvalue() == b""
        assert err.getvalue() == b""
        assert stats.stdout.bytes_read == 0
        assert stats.stdout.partial is False

    def test_small_chunks_reassemble_lines(self, empty_ruleset, pipe_with):
        """Test lines longer than the read size are reassembled."""
        loop, out, _ = make_loop(
            empty_ruleset,
            pipe_with(b"a line longer than a chunk\nand another\n"),
            pipe_with(b""),
            color=False,
            chunk_size=3,
        )

        stats = loop.run()

        assert out.getvalue() == b"a line longer than a chunk\nand another\n"
        assert stats.stdout.bytes_read == 39
        assert stats.stdout.lines == 2

    def test_order_within_each_stream(self, empty_ruleset, pipe_with):
        """Test interleaved streams keep their own line order."""
        stdout_lines = [f"out {i}" for i in range(300)]
        stderr_lines = [f"err {i}" for i in range(300)]
        loop, out, err = make_loop(
            empty_ruleset,
            pipe_with("".join(f"{line}\n" for line in stdout_lines).encode()),
            pipe_with("".join(f"{line}\n" for line in stderr_lines).encode()),
            chunk_size=64,
        )

        loop.run()

        assert ANSI_RE.sub("", out.getvalue().decode()).splitlines() == stdout_lines
        assert ANSI_RE.sub("", err.getvalue().decode()).splitlines() == stderr_lines

    def test_waits_for_both_streams(self, empty_ruleset):
        """Test the loop keeps draining one stream after the other closes."""
        out_r, out_w = os.pipe()
        err_r, err_w = os.pipe()
        os.close(err_w)

        def produce():
            os.write(out_w, b"first\n")
            time.sleep(0.05)
            os.write(out_w, b"second\nlast")
            os.close(out_w)

        producer = threading.Thread(target=produce)
        loop, out, err = make_loop(empty_ruleset, out_r, err_r, color=False, sleep=time.sleep)
        try:
            producer.start()
            loop.run()
        finally:
            producer.join()
            os.close(out_r)
            os.close(err_r)

        assert out.getvalue() == b"first\nsecond\nlast"
        assert err.getvalue() == b""

    def test_accepts_file_objects(self, empty_ruleset, pipe_with):
        """Test sources may be objects with fileno()."""
        with open(pipe_with(b"x\n"), "rb", buffering=0, closefd=False) as stdout_file:
            loop, out, _ = make_loop(empty_ruleset, stdout_file, pipe_with(b""), color=False)
            loop.run()

        assert out.getvalue() == b"x\n"

    def test_sleeps_only_when_idle(self, empty_ruleset):
        """Test the idle sleep is used while no data arrives."""
        out_r, out_w = os.pipe()
        err_r, err_w = os.pipe()
        os.close(err_w)
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 3:
                os.write(out_w, b"late\n")
                os.close(out_w)

        loop, out, _ = make_loop(empty_ruleset, out_r, err_r, color=False, sleep=sleep, sleep_interval=0.25)
        try:
            loop.run()
        finally:
            os.close(out_r)
            os.close(err_r)

        assert out.getvalue() == b"late\n"
        assert len(sleeps) >= 3
        assert set(sleeps) == {0.25}

    def test_capture_mismatch_aborts(self, pipe_with):
        """Test a fatal colorizer error propagates out of the loop."""
        ruleset = RuleSet(rules=(Rule(pattern=re.compile("(a)(b)"), colors=(ColorSpec(),)),))
        loop, _, _ = make_loop(ruleset, pipe_with(b"ab\n"), pipe_with(b""))

        with pytest.raises(CaptureCountError):
            loop.run()

    def test_invalid_chunk_size(self, empty_ruleset):
        """Test chunk_size must be positive."""
        with pytest.raises(ValueError):
            make_loop(empty_ruleset, 0, 1, chunk_size=0)

    def test_rules_apply_per_stream_default(self, pipe_with):
        """Test the same rule resolves against each stream's default."""
        ruleset = parse_rules(["<stderr> = (bg:blue)", "(x) = (attr:bright)"])
        loop, out, err = make_loop(ruleset, pipe_with(b"x\n"), pipe_with(b"x\n"))

        loop.run()

        assert out.getvalue() == b"\x1b[1;37;40mx\x1b[0m\n"
        assert err.getvalue() == b"\x1b[1;31;44mx\x1b[0m\n"
