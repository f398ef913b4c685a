"""LLM adapters implementing TextExplanationService."""
