"""Transfer progress rendering and listener plumbing."""

from dataclasses import dataclass
from typing import Protocol

BAR_WIDTH = 30
_KB = 1024
_MB = 1024 * 1024


def format_bytes(size: int) -> str:
    """Human-scaled byte count: ``B``, ``KB`` (1 decimal) or ``MB`` (2 decimals)."""
    if size < _KB:
        return f"{size} B"
    if size < _MB:
        return f"{size / _KB:.1f} KB"
    return f"{size / _MB:.2f} MB"


def render_progress(loaded: int, total: int | None = None, width: int = BAR_WIDTH) -> str:
    """
    Render a progress line.

    With a known ``total`` this is a bar, a right-justified percentage and a
    ``loaded/total`` byte pair. Without one, only the loaded count. A total of
    zero renders as complete.

    Example:
        >>> render_progress(512, 1024)
        '[===============               ]  50% 512 B/1.0 KB'
        >>> render_progress(2048)
        '2.0 KB'
    """
    if total is None:
        return format_bytes(loaded)

    ratio = 1.0 if total <= 0 else min(max(loaded / total, 0.0), 1.0)
    filled = int(ratio * width + 0.5)
    percent = int(ratio * 100 + 0.5)
    bar = "=" * filled + " " * (width - filled)
    return f"[{bar}] {percent:>3}% {format_bytes(loaded)}/{format_bytes(total)}"


@dataclass
class TransferSession:
    """
    In-memory counters for one transfer. Never persisted.

    Attributes:
        total: Expected size in bytes, None when unknown.
        transferred: Bytes moved so far.
    """

    total: int | None = None
    transferred: int = 0

    def advance(self, size: int) -> None:
        self.transferred += size

    def render(self) -> str:
        return render_progress(self.transferred, self.total)

    def render_complete(self) -> str:
        """Final render; an unknown total is taken to be what was transferred."""
        total = self.total if self.total is not None else self.transferred
        return render_progress(self.transferred, total)


class TransferListener(Protocol):
    """Receives status lines and progress updates from the pipelines."""

    def on_status(self, message: str) -> None: ...

    def on_progress(self, session: TransferSession) -> None: ...

    def on_complete(self, session: TransferSession) -> None: ...


class NullListener:
    """Listener that ignores everything."""

    def on_status(self, message: str) -> None:
        pass

    def on_progress(self, session: TransferSession) -> None:
        pass

    def on_complete(self, session: TransferSession) -> None:
        pass
