"""Domain errors raised by the Plaid sync services."""


class ItemNotFoundError(LookupError):
    """No stored PlaidItem matches the given Plaid item id."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class LinkTokenNotFoundError(LookupError):
    """No stored link token with this id belongs to the user."""

    def __init__(self, link_token_id: str):
        self.link_token_id = link_token_id
        super().__init__(f"Link token not found: {link_token_id}")


class SyncInProgressError(RuntimeError):
    """Another worker holds the sync lease for this item."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Sync already in progress for item {item_id}")


class SyncLeaseLostError(SyncInProgressError):
    """The sync lease expired and another worker took it over mid-sync."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        RuntimeError.__init__(self, f"Sync lease for item {item_id} was taken over")
