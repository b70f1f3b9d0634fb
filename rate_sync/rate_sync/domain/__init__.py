"""Domain layer: constants, entities and exceptions."""
