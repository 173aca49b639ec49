from reportd.models.schemas.annotation import AnnotationDescriptor, AnnotationEvent
from reportd.models.schemas.graph import GraphEdge, GraphNode, NodeGraphResponse
from reportd.models.schemas.sample import InsertSampleRequest, InsertSampleResponse

__all__ = [
    "AnnotationDescriptor",
    "AnnotationEvent",
    "GraphEdge",
    "GraphNode",
    "NodeGraphResponse",
    "InsertSampleRequest",
    "InsertSampleResponse",
]
