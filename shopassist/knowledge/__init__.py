"""Local FAQ knowledge base.

Module scope:
- Literal pattern intent matching (`intent_matcher`).
- Canned response templates per intent (`response_catalog`).

Determinism profile:
- Fully rule based. The only non-determinism is template choice among several
  templates of one category, which uses an injectable random source.
"""
