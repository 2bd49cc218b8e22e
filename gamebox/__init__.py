"""gamebox trust and social-graph service."""
