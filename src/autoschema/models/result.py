from pydantic import Field

from autoschema.models.base import DescriptorModel
from autoschema.models.enums import ArtifactStatus, ErrorKind


class ItemError(DescriptorModel):
    """A non-fatal failure attributed to one entity, request, directory or artifact."""

    kind: ErrorKind
    item: str
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value} error for {self.item}: {self.message}"


class ArtifactReport(DescriptorModel):
    path: str
    status: ArtifactStatus
    size_bytes: int = Field(default=0, ge=0)


class GenerationResult(DescriptorModel):
    """Outcome of one generation run."""

    discovered: list[str] = Field(default_factory=list)
    analyzed: list[str] = Field(default_factory=list)
    request_count: int = Field(default=0, ge=0)
    artifacts: list[ArtifactReport] = Field(default_factory=list)
    errors: list[ItemError] = Field(default_factory=list)
    dry_run: bool = False

    def errors_of(self, kind: ErrorKind) -> list[ItemError]:
        return [error for error in self.errors if error.kind is kind]

    @property
    def success(self) -> bool:
        if not self.discovered or not self.analyzed:
            return False
        return not self.errors_of(ErrorKind.RENDER)


__all__ = ["ItemError", "ArtifactReport", "GenerationResult"]
