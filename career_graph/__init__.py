"""
Career knowledge graph generation pipeline.

Generates skills, roles and industries with an LLM, persists them under
natural-key identity and builds the relationship graph, learning resources
and career pathways on top of the stored entities.
"""

__version__ = "0.1.0"
