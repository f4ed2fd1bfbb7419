"""Prompt templates for grounded and fallback generation.

The grounded prompt and the orchestrator share ``NO_ANSWER_SENTINEL``;
the fallback decision is a substring match on it, so the wording lives
in exactly one place.
"""

from pydantic import BaseModel, Field

NO_ANSWER_SENTINEL = "I don't have that information yet."

APOLOGY_MESSAGE = (
    "Sorry, I encountered an error while processing your request. Please try again."
)

NO_CONTEXT_PLACEHOLDER = "No relevant information found in the knowledge base."
EMPTY_CORPUS_PLACEHOLDER = "No documents in knowledge base yet."
FALLBACK_SEPARATOR = "\n\n---\n\n"


class DomainProfile(BaseModel):
    """The knowledge domain the bot answers about."""

    name: str = "Pollinet"
    description: str = (
        "a decentralized SDK enabling offline Solana transactions "
        "via Bluetooth Low Energy (BLE) mesh networks"
    )
    related_topics: list[str] = Field(default_factory=lambda: ["blockchain", "Solana", "Web3"])

    @property
    def topics_phrase(self) -> str:
        """``"Pollinet, blockchain, Solana, and Web3"``."""
        names = [self.name, *self.related_topics]
        if len(names) == 1:
            return names[0]
        if len(names) == 2:
            return f"{names[0]} and {names[1]}"
        return f"{', '.join(names[:-1])}, and {names[-1]}"

    @property
    def refusal(self) -> str:
        """The fixed sentence used for questions unrelated to the domain."""
        if self.related_topics:
            scope = f"{self.topics_phrase} technologies"
        else:
            scope = self.name
        return (
            f"I'm sorry, but I only answer questions related to {scope}. "
            f"Please ask me something about {self.name}!"
        )


def format_context(chunks: list[str]) -> str:
    """Number retrieved chunks as ``[Context i]`` blocks."""
    if not chunks:
        return NO_CONTEXT_PLACEHOLDER
    return "\n\n".join(
        f"[Context {i + 1}]\n{chunk}" for i, chunk in enumerate(chunks)
    )


def build_grounded_prompt(chunks: list[str], domain: DomainProfile) -> str:
    """System prompt restricting the model to the retrieved context."""
    return (
        f"You are a helpful knowledge base assistant for {domain.name}. "
        f"Your role is to answer questions ONLY using the provided context "
        f"from {domain.name} documents.\n\n"
        "IMPORTANT RULES:\n"
        "1. Answer questions using ONLY the information from the Context sections below.\n"
        "2. If the answer is not in the provided context, respond EXACTLY with: "
        f"\"{NO_ANSWER_SENTINEL}\"\n"
        "3. Never make assumptions or provide information not explicitly stated in the context.\n"
        "4. Be concise and accurate.\n"
        "5. You can use information from previous conversation to provide better context, "
        "but only if it's based on the provided knowledge.\n\n"
        f"Context from {domain.name} documents:\n"
        f"{format_context(chunks)}\n"
        "---"
    )


def build_fallback_prompt(corpus: list[str], domain: DomainProfile) -> str:
    """System prompt with the whole (bounded) corpus and looser grounding rules."""
    full_context = FALLBACK_SEPARATOR.join(corpus) if corpus else EMPTY_CORPUS_PLACEHOLDER
    return (
        f"You are a helpful assistant for {domain.name}, {domain.description}.\n\n"
        f"COMPLETE {domain.name.upper()} KNOWLEDGE BASE:\n"
        f"{full_context}\n"
        "---\n\n"
        "When answering questions:\n"
        "1. First try to answer using the knowledge base above\n"
        f"2. If the question is about {domain.topics_phrase} or closely related topics, "
        "answer using the knowledge base or your understanding of these topics\n"
        "3. If the question is COMPLETELY UNRELATED to these topics, "
        f"respond EXACTLY with: '{domain.refusal}'\n"
        "4. If you're unsure whether a question is related, err on the side of answering "
        "if there's any connection to the topics above\n"
        "5. Keep responses concise and accurate"
    )
