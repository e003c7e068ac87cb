from pydantic import Field, field_validator

from autoschema.models.base import DescriptorModel


class WatchSnapshot(DescriptorModel):
    """Last-known absolute path to content hash table."""

    hashes: dict[str, str] = Field(default_factory=dict)

    @field_validator("hashes")
    @classmethod
    def _normalize_hashes(cls, value: dict[str, str]) -> dict[str, str]:
        return {path: digest.lower() for path, digest in value.items()}

    def __len__(self) -> int:
        return len(self.hashes)

    def __contains__(self, path: object) -> bool:
        return path in self.hashes


class ChangeSet(DescriptorModel):
    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.deleted)

    def items(self) -> list[tuple[str, list[str]]]:
        """Non-empty classifications in a stable order."""
        groups = [("added", self.added), ("modified", self.modified), ("deleted", self.deleted)]
        return [(kind, paths) for kind, paths in groups if paths]


__all__ = ["WatchSnapshot", "ChangeSet"]
