"""Domain layer — input records and error taxonomy.

This layer depends only on stdlib and pydantic.
It must never import from graph, view, services, commands, or config.
"""
