# protocols for text embedding clients

from typing import Optional, Protocol, runtime_checkable

# retrieval and chunk indexing depend on this protocol, never on a concrete provider
@runtime_checkable
class TextEmbeddingProtocol(Protocol):
    """
    Embeds a batch of texts.
    Returns exactly one vector per input text, in input order; an empty batch returns [].
    """
    async def aembed_text(
        self,
        text: list[str],
        task_type: Optional[str] = None,
    ) -> list[list[float]]: ...
