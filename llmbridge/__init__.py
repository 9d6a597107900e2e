"""Provider adapters that plug non-standard chat backends into a generic LLM layer."""
