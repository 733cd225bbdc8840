"""Output renderers — JSON and Rich terminal."""
