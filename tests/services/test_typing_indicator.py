import io
import time
import unittest

from feelix.services.typing_indicator import TypingIndicator


class TypingIndicatorTests(unittest.TestCase):
    def test_animates_and_clears_line(self) -> None:
        stream = io.StringIO()
        with TypingIndicator(prefix="felix> ", interval_seconds=0.01, stream=stream):
            time.sleep(0.05)
        output = stream.getvalue()
        self.assertIn("\rfelix> Felix is typing.", output)
        self.assertTrue(output.endswith("\r"))

    def test_stop_without_start_is_noop(self) -> None:
        stream = io.StringIO()
        indicator = TypingIndicator(stream=stream)
        indicator.stop()
        self.assertEqual("", stream.getvalue())

    def test_closed_stream_ends_animation(self) -> None:
        stream = io.StringIO()
        stream.close()
        indicator = TypingIndicator(interval_seconds=0.01, stream=stream)
        indicator.start()
        indicator.stop()


if __name__ == "__main__":
    unittest.main()
