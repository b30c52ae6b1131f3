from career_graph.generators.base_generator import AnthropicProvider, BaseGenerator
from career_graph.generators.industry_generator import IndustryGenerator
from career_graph.generators.role_generator import RoleGenerator
from career_graph.generators.skill_generator import SkillGenerator

__all__ = [
    "AnthropicProvider",
    "BaseGenerator",
    "IndustryGenerator",
    "RoleGenerator",
    "SkillGenerator",
]
