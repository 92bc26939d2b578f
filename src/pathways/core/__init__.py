"""Core export pipeline.

Modules:
- topic_joiner: Quiz and attempt lookup by roadmap topic
- pathway_assembler: Nested export documents per user
- stats_calculator: Corpus totals, metrics and domain distribution
- serializer: JSON and CSV rendering
- export_sink: Artifact writing
- exporter: Top-level export operations
"""

__all__ = [
    "topic_joiner",
    "pathway_assembler",
    "stats_calculator",
    "serializer",
    "export_sink",
    "exporter",
]
