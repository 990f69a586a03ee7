from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from derbysim.engine.competitor import Competitor


class FinishListener(Protocol):
    """
    Receives the one-shot signals a competitor emits.
    Both methods are called from the competitor's own thread and must not block.
    """

    def notify_finished(self, competitor: Competitor) -> None: ...

    def notify_failed(self, competitor: Competitor, error: BaseException) -> None: ...


class PositionSource(Protocol):
    """What the track needs from whoever asks for the bonus."""

    name: str

    def current_position(self) -> int: ...

    def advance(self, distance: int | None = None) -> int: ...
