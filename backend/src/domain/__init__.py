"""Domain layer: topics, messages, delivery accounting and errors."""
