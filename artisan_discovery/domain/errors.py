from typing import Any, Optional


class DiscoveryError(Exception):
    """Base class for errors raised by the search and recommendation core."""

    pass


class RowDecodeError(DiscoveryError):
    """A row returned by the store does not match the expected schema."""

    def __init__(self, collection: str, row_id: Optional[Any], detail: str):
        self.collection = collection
        self.row_id = row_id
        self.detail = detail
        super().__init__(f"Malformed {collection} row id={row_id}: {detail}")
