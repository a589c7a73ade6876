from __future__ import annotations
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple


class BlockRegistry:
    """
    Named, reusable scenarios insertable with use("name").

    Examples:
      blocks = BlockRegistry()
      blocks.register("pulse", [move("scale", 1.2, 100), move("scale", 1.0, 100)])
      compile_scenario([use("pulse"), use("pulse")], blocks=blocks, ...)
    """

    def __init__(self, blocks: Optional[Mapping[str, Sequence[Any]]] = None) -> None:
        self._table: Dict[str, Tuple[Any, ...]] = {}
        for name, steps in (blocks or {}).items():
            self.register(name, steps)

    def register(self, name: str, steps: Sequence[Any]) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Block name must be a non-empty string (got {name!r})")
        # Shape is validated when a scenario using the block compiles.
        self._table[name] = tuple(steps) if isinstance(steps, (list, tuple)) else steps

    def get(self, name: str) -> Tuple[Any, ...]:
        try:
            return self._table[name]
        except KeyError as e:
            known = ", ".join(sorted(self._table.keys()))
            raise KeyError(f"Unknown block '{name}'. Known: {known}") from e

    def find(self, name: Any) -> Optional[Tuple[Any, ...]]:
        if not isinstance(name, str):
            return None
        return self._table.get(name)

    def names(self) -> list[str]:
        return sorted(self._table.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)


def as_registry(blocks: Any) -> BlockRegistry:
    if isinstance(blocks, BlockRegistry):
        return blocks
    return BlockRegistry(blocks or {})
