"""A lookahead buffer over a one-pass iterator.

The buffer pulls elements from the iterator it wraps ahead of the consumer and
keeps them in a window that can be inspected, modified and spliced before the
elements are consumed.
"""
from __future__ import annotations

from collections import deque
import copy
from typing import Deque, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar


_T = TypeVar('_T')

Rule = Tuple[Sequence[_T], Sequence[_T]]


class IndexOutOfRange(IndexError):
    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f'Buffer index {index} out of range, buffer holds {length} elements')


class InvalidRemoveCount(ValueError):
    def __init__(self, count: int, length: int) -> None:
        self.count = count
        self.length = length
        super().__init__(f'Cannot remove {count} elements, buffer holds {length} elements')


class IteratorBuffer(Iterator[_T]):
    """A buffer of ``window_size + 1`` elements read ahead from an iterator.

    The extra slot means that right after an element is consumed there are
    still ``window_size`` elements of lookahead, unless the iterator is exhausted.
    """

    def __init__(self, iterable: Iterable[_T], window_size: int) -> None:
        if window_size < 0:
            raise ValueError(f'Window size must not be negative, got {window_size}')
        self._iterator = iter(iterable)
        self._opening = True
        self._closing = False
        self._capacity = window_size + 1
        self._buffer: Deque[_T] = deque()
        self._fill()

    def __iter__(self) -> Iterator[_T]:
        return self

    def __next__(self) -> _T:
        self._opening = False
        self._fill()
        if not self._buffer:
            raise StopIteration
        item = self._buffer.popleft()
        self._fill()
        return item

    def __len__(self) -> int:
        # Elements still pending in the iterator are not counted
        return len(self._buffer)

    def __getitem__(self, index: int) -> _T:
        self._check_index(index)
        return self._buffer[index]

    def __setitem__(self, index: int, value: _T) -> None:
        self._fill()
        self._check_index(index)
        self._buffer[index] = value

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}({list(self._buffer)!r}, '
            f'opening={self._opening}, closing={self._closing})'
        )

    @property
    def capacity(self) -> int:
        return self._capacity

    def is_opening(self) -> bool:
        """True if no element has been consumed from the buffer yet."""
        return self._opening

    def is_closing(self) -> bool:
        """True if the iterator is exhausted and only the buffered elements remain."""
        return self._closing

    def snapshot(self) -> Tuple[_T, ...]:
        return tuple(self._buffer)

    def pop(self) -> Optional[_T]:
        """Consume the next element, or return None if there is nothing left.

        Streams that may contain None should be consumed with next() instead.
        """
        return next(self, None)

    def replace(self, remove_count: int, replacement: Sequence[_T]) -> None:
        """Replace the first ``remove_count`` buffered elements with copies of
        ``replacement``.

        The iterator is not touched, so the buffer can end up shorter or longer
        than its capacity.
        """
        if not 0 <= remove_count <= len(self._buffer):
            raise InvalidRemoveCount(remove_count, len(self._buffer))
        for _ in range(remove_count):
            self._buffer.popleft()
        self._buffer.extendleft(reversed([copy.copy(item) for item in replacement]))

    def starts_with(self, prefix: Sequence[_T]) -> bool:
        """True if the whole stream starts with ``prefix``.

        This can only be known before anything was consumed and while the
        buffer is at least as long as the prefix.
        """
        if self._opening and len(prefix) <= len(self._buffer):
            return all(a == b for a, b in zip(self._buffer, prefix))
        return False

    def ends_with(self, suffix: Sequence[_T]) -> bool:
        """True if the iterator is exhausted and the buffer holds exactly ``suffix``."""
        if self._closing and len(suffix) == len(self._buffer):
            return all(a == b for a, b in zip(self._buffer, suffix))
        return False

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._buffer):
            raise IndexOutOfRange(index, len(self._buffer))

    def _fill(self) -> None:
        while not self._closing and len(self._buffer) < self._capacity:
            try:
                self._buffer.append(next(self._iterator))
            except StopIteration:
                self._closing = True


def rewrite(iterable: Iterable[_T], rules: Iterable[Rule[_T]]) -> Iterator[_T]:
    """Substitute token spans in a stream.

    At every position the first rule whose pattern matches the upcoming
    elements is applied and its replacement is emitted as is, without being
    matched again. Matching resumes right after the replacement.
    """
    normalized: List[Tuple[Tuple[_T, ...], Tuple[_T, ...]]] = [
        (tuple(pattern), tuple(replacement)) for pattern, replacement in rules
    ]
    if any(not pattern for pattern, _ in normalized):
        raise ValueError('Rewrite patterns must not be empty')
    window_size = max((len(pattern) for pattern, _ in normalized), default=0)
    return _rewrite(IteratorBuffer(iterable, window_size), normalized)


def _rewrite(
    buffer: IteratorBuffer[_T], rules: List[Tuple[Tuple[_T, ...], Tuple[_T, ...]]]
) -> Iterator[_T]:
    while True:
        for pattern, replacement in rules:
            if _matches(buffer, pattern):
                break
        else:
            try:
                yield next(buffer)
            except StopIteration:
                return
            continue

        buffer.replace(len(pattern), replacement)
        if not replacement:
            # Nothing to emit, the same position has to be matched again
            buffer._fill()
            continue
        for _ in replacement:
            yield next(buffer)


def _matches(buffer: IteratorBuffer[_T], pattern: Sequence[_T]) -> bool:
    return len(pattern) <= len(buffer) and all(buffer[i] == item for i, item in enumerate(pattern))
