"""Package part handling: container, markup trees, relationships and content types."""
