# API Routers
from friendships.routers import friendships

__all__ = ["friendships"]
