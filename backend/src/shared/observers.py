from collections.abc import Callable
from itertools import count
from typing import Generic, ParamSpec

P = ParamSpec("P")


class ListenerRegistry(Generic[P]):
    """Listener set keyed by registration generation.

    Dispatch iterates over the generations present when it started, so
    listeners may subscribe or unsubscribe from inside a callback. A listener
    removed mid-dispatch is not called; one added mid-dispatch waits for the
    next dispatch.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, Callable[P, None]] = {}
        self._generations = count()

    def subscribe(self, listener: Callable[P, None]) -> Callable[[], None]:
        generation = next(self._generations)
        self._listeners[generation] = listener

        def unsubscribe() -> None:
            self._listeners.pop(generation, None)

        return unsubscribe

    def emit(self, *args: P.args, **kwargs: P.kwargs) -> None:
        for generation in list(self._listeners):
            listener = self._listeners.get(generation)
            if listener is not None:
                listener(*args, **kwargs)

    def __len__(self) -> int:
        return len(self._listeners)
