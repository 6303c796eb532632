from models.catalog import TagCatalog
from models.student import Gender, Student
from models.relationship import RelationType, Relationship
from models.project_data import ProjectData, ValidationReport

__all__ = [
    "TagCatalog",
    "Gender",
    "Student",
    "RelationType",
    "Relationship",
    "ProjectData",
    "ValidationReport",
]
