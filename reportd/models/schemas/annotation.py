from pydantic import BaseModel, ConfigDict, Field


class AnnotationDescriptor(BaseModel):
    """Grafana annotation definition attached to every anomaly event."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = "Anomaly Point"
    datasource: str = "Clinic"
    icon_color: str = Field("rgba(255, 96, 96, 1)", alias="iconColor")
    enable: bool = True
    show_line: bool = Field(True, alias="showLine")
    query: str = ""


class AnnotationEvent(BaseModel):
    """One anomaly on the timeline.  Times are unix milliseconds."""
    model_config = ConfigDict(populate_by_name=True)

    annotation: AnnotationDescriptor = Field(default_factory=AnnotationDescriptor)
    time: int
    time_end: int | None = Field(None, alias="timeEnd")
    title: str = "anomaly title"
    tags: str = "anomaly tags"
    text: str = "anomaly text"
    panel_id: int | None = Field(None, alias="panelId")
