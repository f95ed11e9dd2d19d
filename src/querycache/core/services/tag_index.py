"""Tag index for group invalidation."""


class TagIndex:
    """Mapping from tag to the set of cache keys carrying it.

    The index does not watch the entry store. Its owner must call
    ``dissociate`` for every tag of an entry whenever that entry is
    removed, evicted or replaced. Tags whose key set becomes empty are
    dropped.
    """

    def __init__(self) -> None:
        self._keys_by_tag: dict[str, set[str]] = {}

    def associate(self, tag: str, key: str) -> None:
        """Register key under tag."""
        self._keys_by_tag.setdefault(tag, set()).add(key)

    def dissociate(self, tag: str, key: str) -> None:
        """Remove key from tag, dropping the tag once it has no keys."""
        keys = self._keys_by_tag.get(tag)
        if keys is None:
            return
        keys.discard(key)
        if not keys:
            del self._keys_by_tag[tag]

    def keys_for_tag(self, tag: str) -> set[str]:
        """Return a copy of the keys registered under tag."""
        return set(self._keys_by_tag.get(tag, ()))

    def tags(self) -> list[str]:
        """Return the tags currently in the index."""
        return list(self._keys_by_tag)

    def clear(self) -> None:
        self._keys_by_tag.clear()

    def __len__(self) -> int:
        """Return the number of tags with at least one key."""
        return len(self._keys_by_tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._keys_by_tag
