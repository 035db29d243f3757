from enum import Enum
from pydantic import BaseModel, Field


class Marketplace(str, Enum):
    AMAZON = "amazon"
    FLIPKART = "flipkart"
    MEESHO = "meesho"
    GENERIC = "generic"
    UNKNOWN = "unknown"


class StockStatus(str, Enum):
    IN_STOCK = "In Stock"
    OUT_OF_STOCK = "Out of Stock"
    UNKNOWN = "Unknown"


class _Record(BaseModel):
    class Config:
        # Build from snake_case attribute names, export with the camelCase aliases.
        populate_by_name = True


class SkuMapping(_Record):
    """One marketplace SKU -> master SKU row. `status` is carried, never filtered on."""

    sku: str
    msku: str
    status: str | None = None


class ComboComponent(_Record):
    msku: str
    quantity: int = Field(default=1, ge=1)


class ComboDefinition(_Record):
    combo_sku: str = Field(..., alias="comboSku")
    components: list[ComboComponent]


class InventoryItem(_Record):
    """
    One row of the inventory ledger, keyed by MSKU. Only `current_stock`
    changes after load; everything else is fixed until the next load.
    """

    msku: str
    product_name: str = Field(default="Unknown Product", alias="productName")
    location_summary: str = Field(default="Unknown", alias="locationSummary")
    status: StockStatus = StockStatus.OUT_OF_STOCK
    current_stock: int = Field(default=0, ge=0, alias="currentStock")
    original_stock: int = Field(default=0, ge=0, alias="originalStock")
    opening_stock: int = Field(default=0, alias="openingStock")
    buffer_stock: int = Field(default=0, alias="declaredBufferStock")
    location_stock: int = Field(default=0, alias="aggregatedLocationStock")
    location_breakdown: dict[str, int] = Field(
        default_factory=dict, alias="perLocationStock"
    )


class OrderInfo(_Record):
    sku: str | None = None
    quantity: int = 1
    status: str | None = None
    order_date: str | None = Field(default=None, alias="orderDate")
    customer_location: str | None = Field(default=None, alias="customerLocation")
    product_name: str | None = Field(default=None, alias="productName")


class ProcessedOrder(_Record):
    marketplace: Marketplace
    original_sku: str = Field(..., alias="originalSku")
    mapped_msku: str = Field(..., alias="mappedMsku")
    quantity: int
    status: str | None = None
    order_date: str | None = Field(default=None, alias="orderDate")
    customer_location: str | None = Field(default=None, alias="customerLocation")
    product_name: str | None = Field(default=None, alias="productName")
    is_combo_component: bool = Field(default=False, alias="isComboComponent")


class BatchResult(_Record):
    processed_orders: list[ProcessedOrder] = Field(default_factory=list)
    msku_quantities: dict[str, int] = Field(default_factory=dict)
    unmapped_skus: list[str] = Field(default_factory=list)


class InventoryUpdate(_Record):
    msku: str
    original_stock: int = Field(default=0, alias="originalStock")
    sold_quantity: int = Field(..., alias="soldQuantity")
    new_stock: int = Field(default=0, alias="newStock")
    stock_reduced: int = Field(default=0, alias="stockReduced")
    location_summary: str = Field(default="Not Found", alias="locationSummary")
    status: StockStatus = StockStatus.UNKNOWN
    is_out_of_stock: bool = Field(default=True, alias="isOutOfStock")
    not_found_in_ledger: bool = Field(default=False, alias="notFoundInLedger")


class InventoryChange(_Record):
    msku: str
    original_stock: int = Field(..., alias="originalStock")
    current_stock: int = Field(..., alias="currentStock")
    difference: int
    location_summary: str = Field(..., alias="locationSummary")
    status: StockStatus


class MarketplaceSummary(_Record):
    orders_processed: int = Field(default=0, alias="ordersProcessed")
    unique_mskus: int = Field(default=0, alias="uniqueMskus")
    total_quantity: int = Field(default=0, alias="totalQuantity")
    unmapped_skus: int = Field(default=0, alias="unmappedSkus")


class RunSummary(_Record):
    total_orders_processed: int = Field(default=0, alias="totalOrdersProcessed")
    unique_mskus_affected: int = Field(default=0, alias="uniqueMskusAffected")
    total_quantity_sold: int = Field(default=0, alias="totalQuantitySold")
    unmapped_skus_count: int = Field(default=0, alias="unmappedSkusCount")
    out_of_stock_items_count: int = Field(default=0, alias="outOfStockItemsCount")
    marketplace_summary: dict[str, MarketplaceSummary] = Field(
        default_factory=dict, alias="marketplaceSummary"
    )


class FileError(_Record):
    filename: str
    error: str
    details: str


class ProcessingResult(_Record):
    """The full response body of one order-processing run."""

    success: bool = True
    summary: RunSummary
    inventory_updates: list[InventoryUpdate] = Field(
        default_factory=list, alias="inventoryUpdates"
    )
    processed_orders: list[ProcessedOrder] = Field(
        default_factory=list, alias="processedOrders"
    )
    unmapped_skus: list[str] = Field(default_factory=list, alias="unmappedSkus")
    file_errors: list[FileError] = Field(default_factory=list, alias="fileErrors")
    message: str = "Orders processed successfully and inventory updated"


# --- Read-only query views ---


class MappingsView(_Record):
    total_mappings: int = Field(..., alias="totalMappings")
    mappings: list[SkuMapping]


class CombosView(_Record):
    total_combos: int = Field(..., alias="totalCombos")
    combos: list[ComboDefinition]


class InventoryView(_Record):
    total_items: int = Field(..., alias="totalItems")
    inventory: list[InventoryItem]


class ChangesView(_Record):
    total_changes: int = Field(..., alias="totalChanges")
    changes: list[InventoryChange]


class HealthStatus(_Record):
    status: str = "OK"
    mappings_loaded: int = Field(..., alias="mappingsLoaded")
    combos_loaded: int = Field(..., alias="combosLoaded")
    inventory_items: int = Field(..., alias="inventoryItems")
