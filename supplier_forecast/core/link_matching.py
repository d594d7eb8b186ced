# supplier_forecast/core/link_matching.py
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple


@dataclass(frozen=True)
class SupplierLinkSet:
    """Products a supplier is linked to.

    Attributes:
        product_ids: Ids of individually linked products
        sku_patterns: SKU prefixes linked as patterns
    """
    product_ids: FrozenSet[int] = field(default_factory=frozenset)
    sku_patterns: Tuple[str, ...] = ()

    @classmethod
    def from_links(
        cls,
        product_ids: Iterable[Optional[int]],
        sku_patterns: Iterable[Optional[str]]
    ) -> 'SupplierLinkSet':
        """Build a link set, skipping empty ids and blank patterns."""
        return cls(
            product_ids=frozenset(pid for pid in product_ids if pid is not None),
            sku_patterns=tuple(p for p in sku_patterns if p)
        )

    @property
    def is_empty(self) -> bool:
        return not self.product_ids and not self.sku_patterns

    def matches(self, sku: str, product_id: Optional[int] = None) -> bool:
        """Check whether a SKU belongs to the supplier.

        Args:
            sku: SKU code as found in the sales data
            product_id: Catalog id of the product with that SKU

        Returns:
            True if the product is linked individually or the SKU starts
            with one of the linked patterns (case-sensitive)
        """
        if product_id is not None and product_id in self.product_ids:
            return True

        return matches_any_pattern(sku, self.sku_patterns)


def matches_any_pattern(sku: str, patterns: Iterable[str]) -> bool:
    """Check whether a SKU starts with any of the given prefixes."""
    if not sku:
        return False

    return any(pattern and sku.startswith(pattern) for pattern in patterns)
