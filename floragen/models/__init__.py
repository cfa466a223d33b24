from .plant import Plant, PlantBase, PlantCreate, PlantUpdate

__all__ = [
    "Plant",
    "PlantBase",
    "PlantCreate",
    "PlantUpdate",
]
