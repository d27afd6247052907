"""Model catalog data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelCatalogEntry:
    """A model the gateway can route to."""

    id: str
    display_name: str
    provider: str
    description: str | None = None
