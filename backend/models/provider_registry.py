"""Provider registry: endpoints, credentials and default models."""

PROVIDER_CONFIG = {
    "openai": {
        "name": "OpenAI",
        "endpoint": "https://api.openai.com/v1/chat/completions",
        "env_key": "OPENAI_API_KEY",
        "default_model": "gpt-4o-mini",
        "type": "openai"
    },
    "anthropic": {
        "name": "Anthropic",
        "endpoint": "https://api.anthropic.com/v1/messages",
        "env_key": "ANTHROPIC_API_KEY",
        "default_model": "claude-3-5-sonnet-latest",
        "type": "anthropic"
    },
    "google": {
        "name": "Google",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta/models",
        "env_key": "GOOGLE_GENERATIVE_AI_API_KEY",
        "default_model": "gemini-1.5-flash",
        "type": "gemini"
    },
    "groq": {
        "name": "Groq",
        "endpoint": "https://api.groq.com/openai/v1/chat/completions",
        "env_key": "GROQ_API_KEY",
        "default_model": "llama-3.1-70b-versatile",
        "type": "openai"
    },
    "mistral": {
        "name": "Mistral",
        "endpoint": "https://api.mistral.ai/v1/chat/completions",
        "env_key": "MISTRAL_API_KEY",
        "default_model": "mistral-small-latest",
        "type": "openai"
    },
}
