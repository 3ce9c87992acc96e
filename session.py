"""
ChatSession: the caller-side wiring between the normalizer, the
text-generation collaborator and the response extractor.

One session holds at most one Document at a time. Loading a new file
replaces it wholesale and starts a fresh conversation with a summary of
the file. Messages are only ever appended.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ai.response_parser import extract_visualization
from ai.service import AIService
from dto.document import Document
from dto.message import Message, QuestionSuggestion
from normalizer import RawSource, normalize
from prompts.analysis import SUMMARY_QUESTION, get_analysis_prompt

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't analyze the document. Please try again."
EMPTY_REPLY = "Failed to process response"

_MAX_SUGGESTIONS = 5


class ChatSession:
    """
    Usage::

        session = ChatSession(service)
        session.load(raw_bytes, "sales.xlsx")
        reply = session.ask("Which region sold the most?")
        reply.visualization  # VisualizationSpec or None
    """

    def __init__(self, service: AIService):
        self._service = service
        self._document: Optional[Document] = None
        self._messages: List[Message] = []

    @property
    def document(self) -> Optional[Document]:
        return self._document

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def load(self, raw: RawSource, name: str) -> Document:
        """
        Normalise a new file and open a conversation about it.

        On ``WorkbookError`` the current document and messages are left
        as they were.
        """
        document = normalize(raw, name)
        self._document = document
        self._messages = []
        self._messages.append(self._reply(SUMMARY_QUESTION))
        return document

    def ask(self, question: str) -> Message:
        """Record *question*, ask the model, and return the assistant reply."""
        if self._document is None:
            raise ValueError("No document loaded; call load() first")
        question = question.strip()
        if not question:
            raise ValueError("Question must not be empty")

        self._messages.append(Message(role="user", content=question))
        reply = self._reply(question)
        self._messages.append(reply)
        return reply

    def _reply(self, question: str) -> Message:
        prompt = get_analysis_prompt(self._document.transcript, question)
        try:
            raw = self._service.get_decision(prompt)
        except Exception:
            logger.exception("Generation service failed for question %r", question)
            return Message(role="assistant", content=FALLBACK_REPLY)

        result = extract_visualization(raw)
        return Message(
            role="assistant",
            content=result.narrative or EMPTY_REPLY,
            visualization=result.visualization,
        )

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def suggest_questions(self, partial: str) -> List[QuestionSuggestion]:
        """Suggest up to five questions matching what the user has typed."""
        text = partial.strip().lower()
        if not text or self._document is None:
            return []

        columns = self._document.columns
        suggestions: List[QuestionSuggestion] = []
        for column in columns:
            if text in column.lower():
                suggestions.append(
                    QuestionSuggestion(
                        text=f"What is the distribution of {column}?", type="column"
                    )
                )
                suggestions.append(
                    QuestionSuggestion(
                        text=f"What is the average {column}?", type="aggregate"
                    )
                )

        if "how many" in text:
            suggestions.extend(
                QuestionSuggestion(text=f"How many entries have {column}?", type="aggregate")
                for column in columns
            )

        return suggestions[:_MAX_SUGGESTIONS]
