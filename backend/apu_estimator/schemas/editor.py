from pydantic import Field, field_validator

from apu_estimator.core.ids import new_id
from apu_estimator.schemas.base import CamelModel
from apu_estimator.schemas.project import Resource, ResourceType


class ResourceIn(CamelModel):
    id: str | None = None
    name: str = ""
    unit: str = ""
    price: float = Field(default=0.0, ge=0)
    quantity: float = Field(default=0.0, ge=0)
    type: ResourceType = ResourceType.MATERIAL

    def to_resource(self) -> Resource:
        data = self.model_dump(exclude_none=True)
        return Resource(**data)


class ApuDraftUpdate(CamelModel):
    code: str | None = None
    description: str | None = None
    unit: str | None = None
    quantity: float | None = Field(default=None, ge=0)
    indirects_percentage: float | None = Field(default=None, ge=0)
    profit_percentage: float | None = Field(default=None, ge=0)
    category: str | None = None


class GenerateIn(CamelModel):
    prompt: str = Field(min_length=1)


class GeneratedApu(CamelModel):
    """Result of the text-to-APU service; every field may be missing."""
    description: str | None = None
    unit: str | None = None
    resources: list[Resource] | None = None

    @field_validator("resources")
    @classmethod
    def _fresh_repeated_ids(cls, v: list[Resource] | None) -> list[Resource] | None:
        # the service does not guarantee unique ids; a repeat gets a new one
        if not v:
            return v
        taken = {r.id for r in v}
        seen = set()
        out = []
        for r in v:
            if r.id in seen:
                rid = new_id()
                while rid in taken:
                    rid = new_id()
                taken.add(rid)
                r = r.model_copy(update={"id": rid})
            seen.add(r.id)
            out.append(r)
        return out
