"""Generated bindings for proxy filter configuration messages."""
