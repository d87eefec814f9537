"""Card abilities, reactions and the registry that dispatches them."""
