"""Domain models for the RAG pipeline.

Re-exports every public symbol so imports like
``from ragdesk.core.pipeline.models import PipelineState`` keep working.
"""

from .chunk import *  # noqa: F401, F403
from .constants import *  # noqa: F401, F403
from .messages import *  # noqa: F401, F403
from .state import *  # noqa: F401, F403
