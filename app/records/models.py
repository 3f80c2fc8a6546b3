from dataclasses import dataclass


@dataclass(frozen=True)
class PostContent:
    """Decrypted view of a post's sealed fields."""

    id: int
    title: str
    description: str | None = None
    storage_path: str | None = None
