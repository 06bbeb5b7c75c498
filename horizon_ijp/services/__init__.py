"""Query and mutation services for marketplace entities."""
