from datetime import timedelta

from pydantic import BaseModel, Field, SecretStr


class LLMConfig(BaseModel):
    """OpenAI-compatible chat model settings."""

    endpoint: str | None = Field(
        default=None,
        description="Base URL of the model server; None uses the provider default",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""), description="API key for the model server"
    )
    model_name: str = Field(default="gpt-4o", description="Model identifier")
    temperature: float = Field(
        default=0.7, description="Sampling temperature for model responses"
    )
    max_tokens: int = Field(
        default=1024, description="Maximum tokens in a single response"
    )
    model_timeout: timedelta = Field(
        default=timedelta(seconds=20),
        description="Per-call timeout passed to the client",
    )
    max_retries: int = Field(
        default=0,
        description="Client-level retries; the pipeline itself never retries",
    )


class EmbeddingConfig(BaseModel):
    """Embedding model used by the default in-memory vector store."""

    model_name: str = Field(
        default="text-embedding-3-large", description="Embedding model identifier"
    )
    endpoint: str | None = Field(default=None, description="Embedding endpoint")
    api_key: SecretStr = Field(
        default=SecretStr(""), description="API key for the embedding endpoint"
    )


class RagConfig(BaseModel):
    """Retrieval limits and thresholds."""

    top_k: int = Field(
        default=16, ge=1, description="Nearest neighbours requested from the store"
    )
    max_context_chunks: int = Field(
        default=4, ge=1, description="Chunks kept after reordering"
    )
    min_category_chunks: int = Field(
        default=3,
        ge=0,
        description="Below this many category matches the filter is dropped",
    )
    clarification_threshold: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Context relevance under which a clarification is requested",
    )
    documents_path: str | None = Field(
        default=None,
        description="Optional JSONL file of chunks preloaded into the in-memory store",
    )


class ValidationConfig(BaseModel):
    """Answer-quality and handoff thresholds."""

    min_answer_words: int = Field(
        default=20, ge=0, description="Shorter answers are sent to refinement"
    )
    human_assistance_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Context relevance under which a handoff may be suggested",
    )


class SessionConfig(BaseModel):
    """In-memory conversation session settings."""

    ttl: timedelta = Field(
        default=timedelta(hours=24),
        description="Inactivity after which a session is recreated empty",
    )
    default_window_size: int = Field(
        default=10, gt=0, description="History messages handed to the generator"
    )
    max_window_size: int = Field(
        default=20, ge=0, description="Upper bound accepted from callers"
    )
    eviction_interval: timedelta = Field(
        default=timedelta(hours=1),
        description="Period of the expired-session sweep; 0 disables it",
    )


class APIConfig(BaseModel):
    """Chat endpoint settings."""

    request_timeout: timedelta = Field(
        default=timedelta(seconds=25),
        description="Deadline for a whole pipeline invocation",
    )
    max_prompt_length: int = Field(
        default=1000, description="Maximum accepted prompt length in characters"
    )


class LoggingConfig(BaseModel):
    """Root logger settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of coloured text"
    )


class PromptConfig(BaseModel):
    """Prompt text consumed by the generator, refiner and handoff handler.

    The wording is configuration, usually loaded from ``configs/prompt.yml``.
    Templates use ``str.format`` style placeholders (``{question}``,
    ``{context}``, ``{history}``, ``{answer}``, ``{summary}``).
    """

    system_prompt: str = Field(
        default=(
            "You are a knowledgeable and professional representative of our "
            "company. Only use information from the provided context."
        ),
        description="Identity and tone of the assistant",
    )
    context_prompt: str = Field(
        default="Here is relevant context from our company documentation:\n\n{context}",
        description="Wraps the formatted context chunks",
    )
    history_prompt: str = Field(
        default="Previous conversation history:\n{history}",
        description="Wraps the formatted conversation history",
    )
    guideline_prompt: str = Field(
        default=(
            "Remember to follow our company guidelines when responding. Focus on "
            "information from the context provided and maintain our professional tone."
        ),
        description="Closing instruction for first-turn questions",
    )
    conversational_guideline_prompt: str = Field(
        default=(
            "Remember to maintain continuity with the previous conversation. Use "
            "the conversation history for context but focus on answering the "
            "current question using the provided documentation context."
        ),
        description="Closing instruction when history is present",
    )
    refinement_prompt: str = Field(
        default=(
            "You are an expert editor for our company's AI assistant.\n"
            "Original question: {question}\n"
            "Context information: {context}\n"
            "Original answer: {answer}\n"
            "Improve this answer by making it more comprehensive, accurate, and "
            "aligned with our company voice. Only use information from the "
            "provided context."
        ),
        description="Single system message asking the model to rewrite an answer",
    )
    clarification_message: str = Field(
        default=(
            "Could you tell me a bit more about what you are looking for? A "
            "product name, shipment or service helps me find the right "
            "information for you."
        ),
        description="Returned instead of an answer when no relevant context exists",
    )
    handoff_message: str = Field(
        default=(
            "I understand your question about {summary}. To ensure you get the "
            "most accurate and helpful information, I'd like to connect you with "
            "one of our specialists."
        ),
        description="Replaces the answer when human assistance is needed",
    )


class TracingConfig(BaseModel):
    """OpenTelemetry export settings; disabled by default."""

    enabled: bool = Field(default=False, description="Export spans via OTLP/HTTP")
    endpoint: str = Field(default="", description="OTLP/HTTP traces endpoint")
    service_name: str = Field(default="ragdesk", description="Reported service name")
    sample_rate: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Root-span sampling ratio"
    )
    excluded_urls: list[str] = Field(
        default_factory=lambda: ["/health"],
        description="Inbound URLs that are not traced",
    )
