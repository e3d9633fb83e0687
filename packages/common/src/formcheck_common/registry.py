"""Thread-safe registry of named items.

Validators keep several of these: one for named custom validators, one for
reusable schemas and one for named transforms. Lookups take a lock so a
registry can be read from several threads; registration is expected to
happen while the owning object is being configured.

Example:
    ```python
    from formcheck_common.registry import Registry

    checks = Registry[Callable]("validators")
    checks.register("even", lambda value, rule, data: value % 2 == 0 or "Must be even")
    checks.get("even")(3, None, {})
    # 'Must be even'
    ```
"""

import threading
from typing import Dict, Generic, Iterator, List, TypeVar

from formcheck_common.exceptions import NotFoundError, OperationError

T = TypeVar("T")


class Registry(Generic[T]):
    """Named collection of items guarded by a re-entrant lock.

    Args:
        name: Registry name, used in error messages and logs
    """

    def __init__(self, name: str):
        self._name = name
        self._items: Dict[str, T] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        """Get registry name."""
        return self._name

    def register(self, key: str, item: T, allow_overwrite: bool = False) -> None:
        """Register an item under ``key``.

        Args:
            key: Unique name for the item
            item: Item to store
            allow_overwrite: Replace an existing item instead of failing

        Raises:
            OperationError: If ``key`` is taken and ``allow_overwrite`` is False
        """
        with self._lock:
            if not allow_overwrite and key in self._items:
                raise OperationError(
                    f"Item '{key}' already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[key] = item

    def unregister(self, key: str) -> T:
        """Remove and return the item registered under ``key``.

        Raises:
            NotFoundError: If nothing is registered under ``key``
        """
        with self._lock:
            if key not in self._items:
                raise NotFoundError(
                    f"Item not found: {key}",
                    context={"key": key, "registry": self._name},
                )
            return self._items.pop(key)

    def get(self, key: str) -> T:
        """Get the item registered under ``key``.

        Raises:
            NotFoundError: If nothing is registered under ``key``; the
                context lists the available keys
        """
        with self._lock:
            if key not in self._items:
                raise NotFoundError(
                    f"Item not found: {key}",
                    context={
                        "key": key,
                        "registry": self._name,
                        "available_keys": list(self._items.keys()),
                    },
                )
            return self._items[key]

    def get_optional(self, key: str) -> T | None:
        """Get the item registered under ``key`` or None."""
        with self._lock:
            return self._items.get(key)

    def has(self, key: str) -> bool:
        """Check whether ``key`` is registered."""
        with self._lock:
            return key in self._items

    def list_keys(self) -> List[str]:
        """List registered keys in registration order."""
        with self._lock:
            return list(self._items.keys())

    def count(self) -> int:
        """Number of registered items."""
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        """Remove every item."""
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.list_keys())
