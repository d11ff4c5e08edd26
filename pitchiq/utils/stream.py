from typing import AsyncIterator, List


class StreamConsumedError(RuntimeError):
    """Raised when a fragment stream is iterated a second time."""


class FragmentStream:
    """
    Incremental text of one model reply.

    Single consumer: the stream can be iterated once. ``cancel()`` stops
    iteration at the next fragment boundary and closes the source.
    """

    def __init__(self, source: AsyncIterator[str]):
        self._source = source
        self._parts: List[str] = []
        self._consumed = False
        self._cancelled = False
        self.finished = False

    @property
    def text(self) -> str:
        """Everything received so far."""
        return "".join(self._parts)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        self._cancelled = True

    def __aiter__(self):
        if self._consumed:
            raise StreamConsumedError("fragment stream already consumed")
        self._consumed = True
        return self._iterate()

    async def _iterate(self):
        try:
            async for fragment in self._source:
                if self._cancelled:
                    break
                if not fragment:
                    continue
                self._parts.append(fragment)
                yield fragment
                if self._cancelled:
                    break
            else:
                self.finished = True
        finally:
            aclose = getattr(self._source, "aclose", None)
            if aclose is not None:
                await aclose()
