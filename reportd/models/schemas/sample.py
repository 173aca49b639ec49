from pydantic import BaseModel, Field


class InsertSampleRequest(BaseModel):
    """A single point to store, as posted by the diagnosis jobs."""
    timestamp: int = Field(0, description="Unix seconds")
    measurement: str = ""
    tidb_cluster_id: str = ""
    fields: dict[str, bool | int | float | str] = Field(default_factory=dict)
    tags: dict[str, str] = Field(default_factory=dict)


class InsertSampleResponse(BaseModel):
    """Empty acknowledgement."""
