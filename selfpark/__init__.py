from .config import ObjectHandles, ParkingConfig, RewardWeights
from .env.env import ParkingEnv

__all__ = ["ObjectHandles", "ParkingConfig", "ParkingEnv", "RewardWeights"]
