"""Core utilities: exceptions, security, identity, middleware."""
