"""Material models.

Components:
    base: The Material interface, MaterialType tags and MaterialRecord
    simple: Probabilistic diffuse/specular material
"""

from .base import Material, MaterialRecord, MaterialType
from .simple import SimpleMaterial, scatter_simple

__all__ = [
    "Material",
    "MaterialRecord",
    "MaterialType",
    "SimpleMaterial",
    "scatter_simple",
]
