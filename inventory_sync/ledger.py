import logging

from .schemas import InventoryChange, InventoryItem, InventoryUpdate, StockStatus

logger = logging.getLogger(__name__)


class InventoryLedger:
    """
    The working inventory (mutated by sales) and the snapshot it was loaded
    from. The snapshot is never mutated; it is the source of truth for reset.
    """

    def __init__(
        self,
        items: dict[str, InventoryItem] | None = None,
        snapshot: dict[str, InventoryItem] | None = None,
    ):
        self.items: dict[str, InventoryItem] = {}
        self.snapshot: dict[str, InventoryItem] = {}
        if items is not None:
            self.replace(items, snapshot)

    def __len__(self) -> int:
        return len(self.items)

    def replace(
        self,
        items: dict[str, InventoryItem],
        snapshot: dict[str, InventoryItem] | None = None,
    ):
        """Swaps in a freshly loaded ledger. A missing snapshot is taken from `items`."""
        self.items = dict(items)
        if snapshot is None:
            snapshot = {msku: item.model_copy(deep=True) for msku, item in items.items()}
        self.snapshot = dict(snapshot)

    def reset(self):
        """Restores every item to a deep copy of its snapshot entry."""
        self.items = {
            msku: original.model_copy(deep=True)
            for msku, original in self.snapshot.items()
        }
        logger.info(f"🔄 Inventory reset to original state ({len(self.items)} items)")

    def apply_sales(self, msku_quantities: dict[str, int]) -> list[InventoryUpdate]:
        """
        Subtracts sold quantities from current stock, never going below zero.
        MSKUs missing from the ledger are reported with `not_found_in_ledger`.
        Returns the updates sorted by sold quantity, highest first.
        """
        updates: list[InventoryUpdate] = []

        for msku, sold_quantity in msku_quantities.items():
            item = self.items.get(msku)

            if item is None:
                updates.append(
                    InventoryUpdate(
                        msku=msku,
                        sold_quantity=sold_quantity,
                        location_summary="Not Found",
                        status=StockStatus.UNKNOWN,
                        is_out_of_stock=True,
                        not_found_in_ledger=True,
                    )
                )
                continue

            new_stock = max(0, item.current_stock - sold_quantity)
            stock_reduced = item.current_stock - new_stock
            item.current_stock = new_stock

            updates.append(
                InventoryUpdate(
                    msku=msku,
                    original_stock=item.original_stock,
                    sold_quantity=sold_quantity,
                    new_stock=new_stock,
                    stock_reduced=stock_reduced,
                    location_summary=item.location_summary,
                    status=item.status,
                    is_out_of_stock=new_stock == 0,
                )
            )

        missing = sum(1 for u in updates if u.not_found_in_ledger)
        if missing:
            logger.warning(f"⚠️ {missing} sold MSKUs are not in the inventory ledger")

        return sorted(updates, key=lambda u: u.sold_quantity, reverse=True)

    def changes(self) -> list[InventoryChange]:
        """Items whose stock differs from the snapshot, largest decrease first."""
        changes: list[InventoryChange] = []

        for msku, current in self.items.items():
            original = self.snapshot.get(msku)
            if original is None or current.current_stock == original.current_stock:
                continue
            changes.append(
                InventoryChange(
                    msku=msku,
                    original_stock=original.current_stock,
                    current_stock=current.current_stock,
                    difference=original.current_stock - current.current_stock,
                    location_summary=current.location_summary,
                    status=current.status,
                )
            )

        return sorted(changes, key=lambda c: c.difference, reverse=True)
