"""Infrastructure layer — reading record sets from disk."""
