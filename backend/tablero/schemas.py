from typing import Any
from pydantic import BaseModel, ConfigDict, Field

# Request bodies. Values stay loosely typed: the canonicalizer decides
# what survives, exactly as for imported files.

class ProjectIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str = ""
    area: str = ""
    owner: str = ""
    developers: list[str] | str = Field(default_factory=list)
    estimate: str | float | None = ""
    points: float | str | None = None
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    priority: str = ""
    status: str = ""
    description: str = ""

    def raw(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

class TaskIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    assigned_to: list[str] | str = Field(default="", alias="assignedTo")
    estimated_time: float | str | None = Field(default=None, alias="estimatedTime")
    status: str | None = None

    def raw(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

class StatusIn(BaseModel):
    status: str

class MoveIn(BaseModel):
    direction: int

class CatalogNameIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)

class RenameIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_name: str = Field(alias="oldName")
    new_name: str = Field(alias="newName")
