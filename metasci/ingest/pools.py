"""Title-keyed intern pools for shared reference entities."""

from typing import Callable, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class IdCounter:
    """Monotonic id source starting at 0, owned by one pool or session."""

    def __init__(self) -> None:
        self.issued = 0

    def next(self) -> int:
        value = self.issued
        self.issued += 1
        return value


class InternPool(Generic[T]):
    """At most one entity per exact title; the pool owns every instance.

    Ids are handed out on first insert only and equal the entity's
    position in first-seen order, so `get(id)` is an index lookup.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._counter = IdCounter()
        self._entries: list[T] = []
        self._index: dict[str, int] = {}

    def intern(self, title: str, factory: Callable[[int], T]) -> tuple[T, bool]:
        """Return the pooled entity for `title`, creating it if unseen.

        `factory` is called with the new id only when the title is new.
        The second element of the result is True when an insert happened.
        """
        existing = self._index.get(title)
        if existing is not None:
            return self._entries[existing], False

        new_id = self._counter.next()
        entity = factory(new_id)
        self._entries.append(entity)
        self._index[title] = new_id
        return entity, True

    def find(self, title: str) -> Optional[T]:
        idx = self._index.get(title)
        return None if idx is None else self._entries[idx]

    def get(self, entity_id: int) -> T:
        if not 0 <= entity_id < len(self._entries):
            raise KeyError(f"No {self.kind} with id {entity_id}")
        return self._entries[entity_id]

    def titles(self) -> list[str]:
        return list(self._index)

    @property
    def entries(self) -> list[T]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(self._entries)

    def __contains__(self, title: object) -> bool:
        return title in self._index
