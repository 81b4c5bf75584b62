"""Pydantic models for persisted and reported entities.

Field names are snake_case in Python and camelCase on disk and on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WorkspaceMetadata(_CamelModel):
    """Contents of ``.workspace.json``.

    Workspaces created outside the server have no metadata file; for those the
    repository synthesizes metadata from directory stats with ``fallback`` set.
    """

    name: str
    description: str | None = None
    template: str | None = None
    created_at: datetime
    modified_at: datetime
    fallback: bool = Field(default=False, exclude=True)

    @property
    def has_instructions(self) -> bool:
        return self.template is not None

    def to_json_dict(self) -> dict:
        data = super().to_json_dict()
        data["hasInstructions"] = self.has_instructions
        return data

    def to_file_dict(self) -> dict:
        """Fields written to the metadata file."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WorkspaceFile(_CamelModel):
    path: str
    size: int


class WorkspaceInfo(_CamelModel):
    """Metadata plus the result of a directory scan.  Never persisted."""

    metadata: WorkspaceMetadata
    path: str
    file_count: int
    size: int
    files: list[WorkspaceFile] = Field(default_factory=list)

    def to_json_dict(self, include_files: bool = True) -> dict:
        data = self.metadata.to_json_dict()
        data.update(path=self.path, fileCount=self.file_count, size=self.size)
        if include_files:
            data["files"] = [f.to_json_dict() for f in self.files]
        return data


class SharedInstruction(_CamelModel):
    name: str
    content: str
    description: str | None = None
    created_at: datetime
    modified_at: datetime

    @property
    def size(self) -> int:
        return len(self.content)


class GlobalInstructions(_CamelModel):
    content: str
    modified_at: datetime
