"""In-memory, insertion-ordered expense collection.

The store owns the records; persistence is delegated to an optional callback
invoked with the full list after every mutation.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, List, Optional
from uuid import UUID

from expense_tracker.models import Expense

SaveCallback = Callable[[List[Expense]], object]


class ExpenseStore:
    def __init__(
        self,
        expenses: Iterable[Expense] = (),
        on_change: Optional[SaveCallback] = None,
    ):
        self._expenses: List[Expense] = list(expenses)
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(list(self._expenses))

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(list(self._expenses))

    def snapshot(self) -> List[Expense]:
        return list(self._expenses)

    def get(self, expense_id: UUID) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    def add(self, expense: Expense) -> Expense:
        if self.get(expense.id) is not None:
            raise ValueError(f"expense {expense.id} already exists")
        self._expenses.append(expense)
        self._changed()
        return expense

    def remove(self, expense_id: UUID) -> bool:
        before = len(self._expenses)
        self._expenses = [e for e in self._expenses if e.id != expense_id]
        if len(self._expenses) == before:
            return False
        self._changed()
        return True
