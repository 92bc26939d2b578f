"""Pathway export - learner progress extraction for roadmaps, checkpoints and quizzes.

Architecture:
    RecordLoader -> TopicJoiner -> PathwayAssembler builds export documents,
    StatsCalculator computes corpus statistics, and both go through
    Serializer -> ExportSink to land as JSON/CSV artifacts.
"""

__version__ = "0.1.0"
