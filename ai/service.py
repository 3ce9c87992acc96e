from abc import ABC, abstractmethod


class AIService(ABC):
    """
    Base class for the text-generation collaborator.

    Implementations own transport, authentication and retries; the
    core only ever hands over a prompt and reads back the raw reply.
    """

    @abstractmethod
    def get_decision(self, prompt: str) -> str:
        """Return the raw reply to *prompt*, possibly with a visualization block."""
        ...
