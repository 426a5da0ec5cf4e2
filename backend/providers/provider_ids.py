OPENAI_LIKE = {"openai", "groq", "mistral"}
ANTHROPIC = {"anthropic"}
GEMINI = {"google"}

SUPPORTED = OPENAI_LIKE | ANTHROPIC | GEMINI
