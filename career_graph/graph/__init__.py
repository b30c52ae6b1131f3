from career_graph.graph.pathways import CareerPathwayGenerator
from career_graph.graph.persister import EntityPersister
from career_graph.graph.relationships import RelationshipSynthesizer
from career_graph.graph.resources import LearningResourceGenerator
from career_graph.graph.validator import GraphValidator

__all__ = [
    "CareerPathwayGenerator",
    "EntityPersister",
    "GraphValidator",
    "LearningResourceGenerator",
    "RelationshipSynthesizer",
]
