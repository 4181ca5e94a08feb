"""Business logic. Routes call these; they raise app.core.errors types on failure."""
