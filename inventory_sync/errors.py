"""Structured errors surfaced to callers of the reconciliation engine."""


class InventorySyncError(Exception):
    """Base error carrying a short machine-readable reason and a readable detail."""

    reason = "inventory_sync_error"

    def __init__(self, detail: str, reason: str | None = None):
        super().__init__(detail)
        self.detail = detail
        if reason is not None:
            self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {"error": self.reason, "details": self.detail}


class TableParseError(InventorySyncError):
    """Delimited text could not be tokenized."""

    reason = "parse_failure"


class MissingMasterDataError(InventorySyncError):
    """No SKU mapping table is loaded and none was supplied."""

    reason = "missing_master_data"
