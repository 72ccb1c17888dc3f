"""Core routing package.

Architectural role:
    Exposes the decision layer that sits between API/CLI entrypoints and the
    knowledge base and remote model subsystems.

Composition:
    - `router`: per-message decision between knowledge base, remote model and fallback.
    - `routing_types`: result schema returned to adapters.
    - `session`: per-user ownership of router, window and credential.

Determinism and side effects:
    Package import itself is deterministic and side-effect free. Runtime side effects
    are limited to remote calls issued through `shopassist.llm`.
"""
