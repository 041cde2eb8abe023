from typing import Callable, Iterator, Sequence, TypeVar


_T = TypeVar('_T')


class Empty(Iterator[_T]):
    """An iterator that never yields anything."""

    def __iter__(self) -> Iterator[_T]:
        return self

    def __next__(self) -> _T:
        raise StopIteration


def equivalence_classes(
    sequence: Sequence[_T], predicate: Callable[[_T, _T], bool]
) -> Iterator[Sequence[_T]]:
    """Iterate over runs of adjacent elements of ``sequence``.

    A run always holds its first element and extends for as long as
    ``predicate(first, element)`` holds, where ``first`` is the element the run
    started with.

    >>> [list(c) for c in equivalence_classes([0, 2, 1, 3, 4, 5], lambda l, r: l % 2 == r % 2)]
    [[0, 2], [1, 3], [4], [5]]
    """
    last = 0
    while last < len(sequence):
        i = last + 1
        while i < len(sequence) and predicate(sequence[last], sequence[i]):
            i += 1
        yield sequence[last:i]
        last = i
