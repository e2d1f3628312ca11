"""Grouping service — turns raw products into ordered, grouped view rows.

Canonical order (shared by the live table and the export): category sort
position, then product name using locale collation. Filtering keeps a
product when its name or category name contains the search text, its
category matches the category filter, and it is visible (or hidden rows are
shown). Groups are emitted in category sort order; products whose category
cannot be resolved land in a trailing uncategorized bucket.
"""

import locale
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from pricelist.config import get_settings
from pricelist.domain.schemas.category import CategoryRead
from pricelist.domain.schemas.product import ProductFilter, ProductRead
from pricelist.domain.schemas.view import CategoryHeaderRow, GroupedProducts, ProductRow, ViewRow

settings = get_settings()
logger = structlog.get_logger(__name__)

# (product, resolved category name or None, sort position)
_Entry = Tuple[ProductRead, Optional[str], int]


def sort_position(value: Any) -> int:
    """Category sort position; malformed values sort as 0."""
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def configure_collation(name: Optional[str] = None) -> str:
    """Set LC_COLLATE for name sorting; an unknown locale keeps the current one."""
    name = settings.COLLATION_LOCALE if name is None else name
    try:
        return locale.setlocale(locale.LC_COLLATE, name)
    except locale.Error:
        logger.warning("Collation locale unavailable", locale=name)
        return locale.setlocale(locale.LC_COLLATE)


def _name_key(product: ProductRead) -> Tuple[str, str]:
    # Letter case only breaks ties, as in browser collation
    name = str(product.name or "")
    return locale.strxfrm(name.casefold()), locale.strxfrm(name)


def resolve_category(product: ProductRead, categories_by_id: Dict[Any, CategoryRead]) -> Optional[CategoryRead]:
    """The product's category, else the default category, else None."""
    category = categories_by_id.get(product.category_id)
    if category is None:
        category = categories_by_id.get(settings.DEFAULT_CATEGORY_ID)
    return category


def _ordered_entries(products: Sequence[ProductRead], categories: Sequence[CategoryRead]) -> List[_Entry]:
    by_id = {c.id: c for c in categories}
    entries: List[_Entry] = []
    for product in products:
        category = resolve_category(product, by_id)
        if category is not None:
            entries.append((product, category.name, sort_position(category.sort_order)))
        else:
            entries.append((product, None, sort_position(product.category_sort_order)))
    entries.sort(key=lambda e: (e[2], _name_key(e[0])))
    return entries


def sort_products(products: Sequence[ProductRead], categories: Sequence[CategoryRead]) -> List[ProductRead]:
    return [product for product, _, _ in _ordered_entries(products, categories)]


def matches(product: ProductRead, category_name: str, filters: ProductFilter) -> bool:
    query = (filters.search or "").casefold()
    text_match = query in str(product.name or "").casefold() or query in (category_name or "").casefold()
    category_match = filters.category == "all" or filters.category == category_name
    visible = filters.show_hidden or not product.is_hidden
    return text_match and category_match and visible


def group_products(
    products: Sequence[ProductRead],
    categories: Sequence[CategoryRead],
    filters: ProductFilter,
) -> GroupedProducts:
    """Filter and group products; categories come out in display order."""
    uncategorized = settings.UNCATEGORIZED_LABEL
    groups: Dict[str, List[ProductRead]] = {}
    for product, category_name, _ in _ordered_entries(products, categories):
        label = category_name if category_name is not None else uncategorized
        if matches(product, label, filters):
            groups.setdefault(label, []).append(product)

    keys: List[str] = []
    for category in sorted(categories, key=lambda c: sort_position(c.sort_order)):
        if category.name in groups and category.name not in keys:
            keys.append(category.name)
    # Unresolved products share a bucket with any real category of the same name
    if uncategorized in keys:
        groups[uncategorized].sort(key=_name_key)
    elif uncategorized in groups:
        keys.append(uncategorized)

    return GroupedProducts(
        categories=keys,
        products=[p for k in keys for p in groups[k]],
        counts=[len(groups[k]) for k in keys],
    )


def flatten(grouped: GroupedProducts) -> List[ViewRow]:
    """One header row per category followed by its product rows."""
    rows: List[ViewRow] = []
    offset = 0
    for name, count in zip(grouped.categories, grouped.counts):
        rows.append(CategoryHeaderRow(name=name))
        rows.extend(ProductRow(product=p) for p in grouped.products[offset:offset + count])
        offset += count
    return rows


def build_view_rows(
    products: Sequence[ProductRead],
    categories: Sequence[CategoryRead],
    filters: ProductFilter,
) -> List[ViewRow]:
    return flatten(group_products(products, categories, filters))
