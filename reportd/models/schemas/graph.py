from pydantic import BaseModel, ConfigDict, Field


class GraphNode(BaseModel):
    """A diagnostic check rendered in the node graph panel."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    sub_title: str = Field("", alias="subTitle")
    main_stat: str = Field("", alias="mainStat")
    secondary_stat: str = Field("", alias="secondaryStat")
    arc_positive: float = Field(..., alias="arc__similarity")
    arc_negative: float = Field(..., alias="arc__nusimilarity")
    arc_positive_color: str = Field("red", alias="arc__similarity_color")
    arc_negative_color: str = Field("green", alias="arc__nusimilarity_color")


class GraphEdge(BaseModel):
    """A dependency between two active checks."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    source: str
    target: str
    main_stat: str | None = Field(None, alias="mainStat")
    secondary_stat: str | None = Field(None, alias="secondaryStat")


class NodeGraphResponse(BaseModel):
    """Induced subgraph over the active checks."""
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
