import sys
import threading
from typing import TextIO

_DOT_FRAMES = (".  ", ".. ", "...")


class TypingIndicator:
    """Animated "Felix is typing..." line shown while a reply is pending.

    Runs on a daemon thread so it keeps animating while the event loop
    sleeps through the reply delay. ``stop`` erases the line.
    """

    def __init__(
        self,
        prefix: str = "",
        label: str = "Felix is typing",
        *,
        interval_seconds: float = 0.3,
        stream: TextIO | None = None,
    ):
        self._prefix = prefix
        self._label = label
        self._interval_seconds = interval_seconds
        self._stream = stream or sys.stdout
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def __enter__(self) -> "TypingIndicator":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._animate, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None or self._stop.is_set():
            return
        self._stop.set()
        self._thread.join()
        width = len(self._prefix) + len(self._label) + len(_DOT_FRAMES[-1])
        self._write("\r" + " " * width + "\r")

    def _animate(self) -> None:
        frame = 0
        while not self._stop.is_set():
            dots = _DOT_FRAMES[frame % len(_DOT_FRAMES)]
            if not self._write(f"\r{self._prefix}{self._label}{dots}"):
                return
            frame += 1
            self._stop.wait(self._interval_seconds)

    def _write(self, text: str) -> bool:
        try:
            self._stream.write(text)
            self._stream.flush()
        except (UnicodeEncodeError, OSError, ValueError):
            # Closed or non-interactive stream.
            return False
        return True
