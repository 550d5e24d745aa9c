from .model import ActorCritic

__all__ = ["ActorCritic"]
