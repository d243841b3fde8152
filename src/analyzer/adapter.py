"""Model provider interface used by AnalysisOracle."""

from abc import ABC, abstractmethod

from .models import Message


class LLMAdapter(ABC):
    """A chat-completion provider.

    AnalysisOracle owns caching, admission control and the per-request
    deadline; an adapter only turns a message list into response text.
    Provider failures must surface as OracleError subclasses.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier sent to the provider."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name, used in logs."""

    @abstractmethod
    def complete(
        self,
        messages: list[Message],
        temperature: float = 0.0,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> str:
        """Return the completion text for messages.

        With json_mode the provider is asked to answer with a single JSON
        object. The text is returned unparsed.

        Raises:
            LLMConnectionError: The provider could not be reached.
            LLMAuthenticationError: Credentials were rejected.
            LLMRateLimitError: The provider's own quota was hit.
            LLMResponseError: The provider answered with an error or nothing.
            OracleTimeoutError: The transport gave up waiting.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider_name!r}, model={self.model_name!r})"
