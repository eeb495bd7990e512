"""Infrastructure: Redis-backed cache implementation."""
