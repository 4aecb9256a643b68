"""Infrastructure adapters: HTTP transport, login and observability."""
