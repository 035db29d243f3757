from typing import Any

from .schemas import ComboComponent, ComboDefinition, Marketplace, SkuMapping


class SkuCatalog:
    """
    The SKU -> MSKU mapping table and the combo table, plus the lookups that
    turn a raw marketplace SKU into the master SKUs it consumes.
    """

    def __init__(
        self,
        mappings: dict[str, SkuMapping] | None = None,
        combos: dict[str, list[ComboComponent]] | None = None,
    ):
        self.mappings: dict[str, SkuMapping] = mappings or {}
        self.combos: dict[str, list[ComboComponent]] = combos or {}

    def replace_mappings(self, mappings: dict[str, SkuMapping]):
        self.mappings = dict(mappings)

    def replace_combos(self, combos: dict[str, list[ComboComponent]]):
        self.combos = dict(combos)

    def map_sku(self, sku: Any, marketplace: Marketplace) -> str:
        """
        Maps a raw SKU to its MSKU. Meesho exports already carry the MSKU, so
        their SKUs pass through untouched; unmapped SKUs fall back to themselves.
        """
        if marketplace == Marketplace.MEESHO:
            return "" if sku is None else str(sku)

        clean_sku = "" if sku is None else str(sku).strip()
        mapping = self.mappings.get(clean_sku)
        if mapping is not None:
            return mapping.msku
        return clean_sku

    def expand_sku(self, sku: Any, marketplace: Marketplace) -> list[ComboComponent]:
        """
        Expands a SKU into the components it consumes. Combos may be keyed by
        either the mapped MSKU or the raw marketplace SKU; the MSKU is tried first.
        """
        mapped_msku = self.map_sku(sku, marketplace)

        if mapped_msku in self.combos:
            return self.combos[mapped_msku]
        raw_sku = "" if sku is None else str(sku)
        if raw_sku in self.combos:
            return self.combos[raw_sku]

        return [ComboComponent(msku=mapped_msku, quantity=1)]

    def mapping_records(self) -> list[SkuMapping]:
        return list(self.mappings.values())

    def combo_records(self) -> list[ComboDefinition]:
        return [
            ComboDefinition(combo_sku=combo_sku, components=components)
            for combo_sku, components in self.combos.items()
        ]
