from ai.service import AIService
from ai.response_parser import (
    VISUALIZATION_END,
    VISUALIZATION_START,
    extract_visualization,
)

__all__ = [
    "AIService",
    "VISUALIZATION_START",
    "VISUALIZATION_END",
    "extract_visualization",
]
