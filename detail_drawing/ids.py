"""
Генерация идентификаторов для фигур и размеров, создаваемых движками.

Генератор передаётся в движки явно: последовательный счётчик даёт
воспроизводимый результат, UUID даёт уникальность между сессиями.
Ни один генератор не выдаёт id, уже занятый во входных данных.
"""

import uuid
from typing import Iterable, Set


class IdGenerator:
    """Последовательные идентификаторы вида '{prefix}-{n}'."""

    def __init__(self, start: int = 1, reserved: Iterable[str] = ()):
        self._counter = start
        self._reserved: Set[str] = set(reserved)

    def reserve(self, ids: Iterable[str]) -> None:
        """Пометить идентификаторы как занятые."""
        self._reserved.update(ids)

    def is_reserved(self, item_id: str) -> bool:
        return item_id in self._reserved

    def _candidate(self, prefix: str) -> str:
        candidate = f"{prefix}-{self._counter}"
        self._counter += 1
        return candidate

    def next_id(self, prefix: str) -> str:
        """Выдать новый свободный идентификатор с префиксом."""
        candidate = self._candidate(prefix)
        while candidate in self._reserved:
            candidate = self._candidate(prefix)
        self._reserved.add(candidate)
        return candidate

    def claim(self, preferred: str) -> str:
        """Занять id как есть, а если он занят, выдать next_id(preferred)."""
        if preferred in self._reserved:
            return self.next_id(preferred)
        self._reserved.add(preferred)
        return preferred


class UuidIdGenerator(IdGenerator):
    """Идентификаторы вида '{prefix}-{uuid4 hex[:12]}'."""

    def _candidate(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[:12]}"


def reserve_ids(id_gen, *collections) -> IdGenerator:
    """Вернуть генератор (новый при None), зарезервировав id коллекций."""
    if id_gen is None:
        id_gen = IdGenerator()
    for items in collections:
        id_gen.reserve(item.id for item in items)
    return id_gen
