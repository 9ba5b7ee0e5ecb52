"""Catalog errors."""


class CatalogError(Exception):
    """Base exception for catalog repository operations."""


class NotFoundError(CatalogError):
    """Raised when a document path does not exist in the store."""


class AlreadyExistsError(CatalogError):
    """Raised when a document would overwrite an existing one."""


class ItemValidationError(CatalogError):
    """Raised when an item fails a precondition before any store mutation.

    Attributes:
        problems: Human-readable description of every violated precondition.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class StoreIOError(CatalogError):
    """Raised when the backing store fails for store-specific reasons."""
