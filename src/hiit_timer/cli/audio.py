"""Terminal-bell implementation of the AudioOutput capability."""

from rich.console import Console

from ..core.events import Sound

# Bells rung per sound; completion gets the longest signal
_BELLS: dict[Sound, int] = {
    Sound.COUNTDOWN: 1,
    Sound.START: 2,
    Sound.REST: 1,
    Sound.COMPLETION: 3,
}


class TerminalBell:
    """Rings the terminal bell through a Rich console."""

    def __init__(self, console: Console, enabled: bool = True):
        self.console = console
        self.enabled = enabled
        self.ready = False

    def resume(self) -> None:
        # Nothing to wake up for a terminal; sounds are held back until the session starts.
        self.ready = True

    def play(self, sound: Sound) -> None:
        if not self.enabled or not self.ready:
            return
        for _ in range(_BELLS[sound]):
            self.console.bell()
