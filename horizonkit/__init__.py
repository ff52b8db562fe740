"""Event matchers, handler middleware, WSGI adapters and example CQRS domains."""

__version__ = "0.1.0"

__all__ = [
    "coverage",
    "eventing",
    "guestlist_aggregate",
    "guestlist_model",
    "guestlist_projectors",
    "httpapi",
    "todo_domain",
    "todo_model",
]