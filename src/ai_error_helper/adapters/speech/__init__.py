"""Speech adapters implementing SpeechSynthesisService."""
