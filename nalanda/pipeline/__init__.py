from .context import format_context
from .graph import build_retrieval_graph
from .service import GENERIC_ERROR_MESSAGE, AnswerPipeline, stream_answer
from .state import PipelineStage, PipelineState, create_initial_state

__all__ = [
    "AnswerPipeline",
    "GENERIC_ERROR_MESSAGE",
    "PipelineStage",
    "PipelineState",
    "build_retrieval_graph",
    "create_initial_state",
    "format_context",
    "stream_answer",
]
