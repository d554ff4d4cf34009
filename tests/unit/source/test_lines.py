"""Tests for the line decoder over raw byte streams.

Checks terminator stripping, blank-line filtering and invalid UTF-8.
Also verifies that a fired token aborts the pull with ``SearchAborted``,
even while the writing end of the pipe stays open.
"""

from __future__ import annotations

import io
import os
import threading
import time
import unittest

from lazyfind.source.cancel import CancellationToken, SearchAborted
from lazyfind.source.lines import decode_line, iter_lines


class LineDecoderTests(unittest.TestCase):
    def test_decode_line_strips_lf_and_crlf(self) -> None:
        self.assertEqual(decode_line(b"a.txt\n"), "a.txt")
        self.assertEqual(decode_line(b"b.txt\r\n"), "b.txt")
        self.assertEqual(decode_line(b"c.txt"), "c.txt")

    def test_iter_lines_skips_empty_lines_and_keeps_order(self) -> None:
        stream = io.BytesIO(b"a.txt\n\nb/\r\n\r\nc d.txt\nlast")

        self.assertEqual(list(iter_lines(stream)), ["a.txt", "b/", "c d.txt", "last"])

    def test_iter_lines_keeps_whitespace_only_lines_for_caller_to_trim(self) -> None:
        stream = io.BytesIO(b"  \nx\n")

        self.assertEqual(list(iter_lines(stream)), ["  ", "x"])

    def test_invalid_utf8_is_replaced(self) -> None:
        stream = io.BytesIO(b"caf\xe9.txt\n")

        self.assertEqual(list(iter_lines(stream)), ["caf�.txt"])

    def test_empty_stream_yields_nothing(self) -> None:
        self.assertEqual(list(iter_lines(io.BytesIO(b""))), [])

    def test_fired_token_aborts_before_first_pull(self) -> None:
        token = CancellationToken()
        token.fire()

        with self.assertRaises(SearchAborted):
            next(iter_lines(io.BytesIO(b"a\n"), token))

    def test_token_fired_while_pipe_is_held_open_aborts_promptly(self) -> None:
        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, "rb")
        token = CancellationToken()
        try:
            os.write(write_fd, b"first\n")
            lines = iter_lines(reader, token)
            self.assertEqual(next(lines), "first")

            timer = threading.Timer(0.1, token.fire, args=("consumer left",))
            timer.start()
            started = time.monotonic()
            with self.assertRaises(SearchAborted) as ctx:
                next(lines)
            elapsed = time.monotonic() - started
            timer.join()
        finally:
            os.close(write_fd)
            reader.close()

        self.assertLess(elapsed, 2.0)
        self.assertEqual(ctx.exception.reason, "consumer left")

    def test_lines_read_before_fire_are_not_yielded_after_it(self) -> None:
        token = CancellationToken()
        lines = iter_lines(io.BytesIO(b"first\nsecond\nthird\n"), token)

        self.assertEqual(next(lines), "first")
        token.fire()
        with self.assertRaises(SearchAborted):
            next(lines)

    def test_aborted_is_distinct_from_stream_errors(self) -> None:
        class _Broken:
            def readline(self) -> bytes:
                raise OSError("boom")

        with self.assertRaises(OSError) as ctx:
            list(iter_lines(_Broken(), CancellationToken()))
        self.assertNotIsInstance(ctx.exception, SearchAborted)


if __name__ == "__main__":
    unittest.main()
