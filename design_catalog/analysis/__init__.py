"""Source parsing and component analysis."""
