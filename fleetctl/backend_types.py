from pydantic import BaseModel, Field


class Tag(BaseModel):
    id: int | None = None
    tag_key: str
    value: str = ""


class Release(BaseModel):
    id: int
    commit: str
    status: str | None = None


class ReleaseListResponse(BaseModel):
    releases: list[Release] = Field(default_factory=list)
