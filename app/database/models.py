from dataclasses import dataclass


@dataclass(frozen=True)
class StoredAsset:
    """A post's sealed storage path, as returned for purge collection."""

    record_id: int
    sealed_path: str
