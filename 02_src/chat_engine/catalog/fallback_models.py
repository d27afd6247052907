"""Built-in model table used when the gateway cannot list models."""

from ..models import ModelCatalogEntry

FALLBACK_MODELS: tuple[ModelCatalogEntry, ...] = (
    ModelCatalogEntry("claude-3-7-sonnet", "Claude 3.7 Sonnet", "anthropic"),
    ModelCatalogEntry("claude-3-5-sonnet", "Claude 3.5 Sonnet", "anthropic"),
    ModelCatalogEntry("o1", "o1", "openai"),
    ModelCatalogEntry("o1-pro", "o1-pro", "openai"),
    ModelCatalogEntry("o1-mini", "o1-mini", "openai"),
    ModelCatalogEntry("o3", "o3", "openai"),
    ModelCatalogEntry("o3-mini", "o3-mini", "openai"),
    ModelCatalogEntry("o4-mini", "o4-mini", "openai"),
    ModelCatalogEntry("gpt-4o", "GPT-4o", "openai"),
    ModelCatalogEntry("gpt-4o-mini", "GPT-4o Mini", "openai"),
    ModelCatalogEntry("gpt-4.1", "GPT-4.1", "openai"),
    ModelCatalogEntry("gpt-4.1-mini", "GPT-4.1 Mini", "openai"),
    ModelCatalogEntry("gpt-4.1-nano", "GPT-4.1 Nano", "openai"),
    ModelCatalogEntry("gpt-4.5-preview", "GPT-4.5 Preview", "openai"),
    ModelCatalogEntry(
        "meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo", "Meta Llama 3.1 8B", "meta"
    ),
    ModelCatalogEntry(
        "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo", "Meta Llama 3.1 70B", "meta"
    ),
    ModelCatalogEntry(
        "meta-llama/Meta-Llama-3.1-405B-Instruct-Turbo", "Meta Llama 3.1 405B", "meta"
    ),
    ModelCatalogEntry("gemini-2.0-flash", "Gemini 2.0 Flash", "google"),
    ModelCatalogEntry("gemini-1.5-flash", "Gemini 1.5 Flash", "google"),
    ModelCatalogEntry("deepseek-chat", "DeepSeek Chat", "deepseek"),
    ModelCatalogEntry("deepseek-reasoner", "DeepSeek Reasoner", "deepseek"),
    ModelCatalogEntry("mistral-large-latest", "Mistral Large", "mistral"),
    ModelCatalogEntry("pixtral-large-latest", "Pixtral Large", "mistral"),
    ModelCatalogEntry("codestral-latest", "Codestral", "mistral"),
    ModelCatalogEntry("google/gemma-2-27b-it", "Gemma 2 27B", "google"),
    ModelCatalogEntry("grok-beta", "Grok Beta", "xai"),
)
