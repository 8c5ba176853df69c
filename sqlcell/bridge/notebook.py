from __future__ import annotations

import itertools
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List

from pydantic import BaseModel, Field

from sqlcell.core.errors import CellNotFoundError

if TYPE_CHECKING:
    from .client import BridgeClient


class CellStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class CellPosition(str, Enum):
    ABOVE = "above"
    BELOW = "below"


class Cell(BaseModel):
    """A single SQL editor cell"""

    id: str = Field(..., description="Cell identifier")
    sql: str = Field("", description="SQL text in the editor")


class CellResult(BaseModel):
    cell_id: str
    status: CellStatus = CellStatus.IDLE
    result: str = ""
    execution_time_ms: float | None = None


class Notebook:
    """
    Ordered SQL cells with one active cell, as shown by the editor UI.

    A notebook always holds at least one cell, and the active cell id
    always refers to one of them.
    """

    def __init__(self, cells: Iterable[Cell] | None = None):
        self._cells: List[Cell] = list(cells or [])
        if not self._cells:
            self._cells.append(Cell(id="1"))
        self._results: Dict[str, CellResult] = {}
        self._ids = itertools.count(len(self._cells) + 1)
        self.active_cell_id: str = self._cells[0].id

    @property
    def cells(self) -> List[Cell]:
        return list(self._cells)

    def _index(self, cell_id: str) -> int:
        for index, cell in enumerate(self._cells):
            if cell.id == cell_id:
                return index
        raise CellNotFoundError(f"No cell with id {cell_id}")

    def _new_id(self) -> str:
        taken = {cell.id for cell in self._cells}
        while True:
            candidate = str(next(self._ids))
            if candidate not in taken:
                return candidate

    def cell(self, cell_id: str) -> Cell:
        return self._cells[self._index(cell_id)]

    def result_for(self, cell_id: str) -> CellResult:
        self._index(cell_id)
        return self._results.get(cell_id) or CellResult(cell_id=cell_id)

    def activate(self, cell_id: str) -> None:
        self._index(cell_id)
        self.active_cell_id = cell_id

    def set_sql(self, cell_id: str, sql: str) -> None:
        self.cell(cell_id).sql = sql

    def add_cell(self, position: CellPosition = CellPosition.BELOW) -> Cell:
        """Insert an empty cell next to the active one and make it active."""
        index = self._index(self.active_cell_id)
        if position is CellPosition.BELOW:
            index += 1

        cell = Cell(id=self._new_id())
        self._cells.insert(index, cell)
        self.active_cell_id = cell.id
        return cell

    def delete_cell(self, cell_id: str) -> bool:
        """
        Remove a cell. The last remaining cell is never deleted.

        The active cell moves to the cell before the deleted one, or to the
        first cell when the first one was deleted.
        """
        index = self._index(cell_id)
        if len(self._cells) <= 1:
            return False

        del self._cells[index]
        self._results.pop(cell_id, None)
        self.active_cell_id = self._cells[index - 1].id if index > 0 else self._cells[0].id
        return True

    def clear_result(self, cell_id: str) -> None:
        self._index(cell_id)
        self._results[cell_id] = CellResult(cell_id=cell_id)

    def run(self, cell_id: str, client: BridgeClient) -> CellResult:
        """Execute one cell through ``client``; blank cells are left untouched."""
        cell = self.cell(cell_id)
        if not cell.sql.strip():
            return self.result_for(cell_id)

        self._results[cell_id] = CellResult(cell_id=cell_id, status=CellStatus.RUNNING)
        outcome = client.run_cell(cell)
        self._results[cell_id] = outcome
        return outcome
