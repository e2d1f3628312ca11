"""Column registry: the column catalogue and the user's order/visibility.

Order and visibility persist independently, so hiding a column keeps its
position. Column ids the catalogue gains later are appended to a saved order
on every load instead of being lost.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog

from pricelist.domain.schemas.view import ColumnDescriptor
from pricelist.infrastructure.local_store import COLUMN_ORDER_KEY, VISIBLE_COLUMNS_KEY, LocalStateStore

logger = structlog.get_logger(__name__)

NAME_COLUMN = "name"

COLUMN_CATALOG: Dict[str, ColumnDescriptor] = {
    c.id: c
    for c in [
        ColumnDescriptor(id="name", header="اسم المادة", kind="data", align="right", min_width=200, editable=True),
        ColumnDescriptor(id="syp_final", header="ل.س.ق (النهائي)", kind="computed", min_width=120),
        ColumnDescriptor(id="cost_usd", header="التكلفة ($)", editable=True),
        ColumnDescriptor(id="profit_syp", header="الربح", editable=True),
        ColumnDescriptor(id="wholesale_carton_usd", header="جملة كروز ($)", min_width=110, editable=True),
        ColumnDescriptor(id="lsg", header="ل.س.ج", kind="computed"),
        ColumnDescriptor(id="case_usd", header="الكرتونة ($)", kind="computed", min_width=120),
        ColumnDescriptor(id="wholesale_case_usd", header="جملة كرتونة ($)", kind="computed", min_width=130),
    ]
}
ACTIONS_COLUMN = ColumnDescriptor(id="actions", header="", kind="actions", min_width=80)

DEFAULT_COLUMNS: List[str] = list(COLUMN_CATALOG)
DEFAULT_VISIBLE: List[str] = DEFAULT_COLUMNS[:6]


def _id_list(value: Any) -> Optional[List[str]]:
    """A de-duplicated list of ids, or None when the value is not a list of strings."""
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return None
    return list(dict.fromkeys(value))


def reconcile_order(saved: Any, known_ids: Sequence[str] = DEFAULT_COLUMNS) -> List[str]:
    """Saved order with every missing known id appended at the end."""
    order = _id_list(saved)
    if order is None:
        return list(known_ids)
    return order + [c for c in known_ids if c not in order]


def sanitize_visible(saved: Any) -> List[str]:
    """Saved visible ids; empty, malformed or name-less sets fall back to the defaults."""
    visible = _id_list(saved)
    if not visible or NAME_COLUMN not in visible:
        return list(DEFAULT_VISIBLE)
    return visible


def ordered_visible_columns(
    order: Any,
    visible: Any,
    known_ids: Sequence[str] = DEFAULT_COLUMNS,
    editing: bool = False,
    catalog: Dict[str, ColumnDescriptor] = COLUMN_CATALOG,
) -> List[ColumnDescriptor]:
    """Visible columns in display order; the actions column trails while a row is edited."""
    visible_ids = set(sanitize_visible(visible))
    columns = [catalog[c] for c in reconcile_order(order, known_ids) if c in visible_ids and c in catalog]
    if editing:
        columns.append(ACTIONS_COLUMN)
    return columns


class ColumnRegistry:
    """User column configuration backed by the local state store."""

    def __init__(self, store: LocalStateStore):
        self.store = store
        self.order = reconcile_order(store.get(COLUMN_ORDER_KEY))
        self.visible = sanitize_visible(store.get(VISIBLE_COLUMNS_KEY))

    def columns(self, editing: bool = False) -> List[ColumnDescriptor]:
        return ordered_visible_columns(self.order, self.visible, editing=editing)

    def is_visible(self, column_id: str) -> bool:
        return column_id in self.visible

    def toggle(self, column_id: str) -> None:
        if column_id not in COLUMN_CATALOG:
            return
        if column_id in self.visible:
            if column_id == NAME_COLUMN:
                return
            self.visible = [c for c in self.visible if c != column_id]
        else:
            self.visible = self.visible + [column_id]
        self._save()

    def move(self, column_id: str, offset: int) -> None:
        """Swap a column with its neighbour; no-op at either edge."""
        if column_id not in self.order:
            return
        index = self.order.index(column_id)
        target = index + offset
        if offset == 0 or not 0 <= target < len(self.order):
            return
        order = list(self.order)
        order[index], order[target] = order[target], order[index]
        self.order = order
        self._save()

    def reset(self) -> None:
        self.order = list(DEFAULT_COLUMNS)
        self.visible = list(DEFAULT_VISIBLE)
        self.store.remove(COLUMN_ORDER_KEY)
        self.store.remove(VISIBLE_COLUMNS_KEY)
        logger.info("Column settings reset")

    def _save(self) -> None:
        self.store.set(COLUMN_ORDER_KEY, self.order)
        self.store.set(VISIBLE_COLUMNS_KEY, self.visible)
