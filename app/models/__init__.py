from app.models.generation import Generation
from app.models.asset import Asset

__all__ = ["Generation", "Asset"]
