from __future__ import annotations

import numpy as np
import torch
from torch import nn

from ..actions import ACTION_DIM
from ..env.observations import check_obs_dim

# Keeps tanh inverses and log(1 - a^2) finite at the action bounds.
SQUASH_EPS = 1e-6


def _unsquash(action: torch.Tensor) -> torch.Tensor:
    a = action.clamp(-1.0 + SQUASH_EPS, 1.0 - SQUASH_EPS)
    return 0.5 * (torch.log1p(a) - torch.log1p(-a))


def _squash_correction(action: torch.Tensor) -> torch.Tensor:
    """log|d tanh(u)/du| summed over action dims."""
    return torch.log(1.0 - action.pow(2) + SQUASH_EPS).sum(-1)


class ActorCritic(nn.Module):
    """Two-layer MLP with a Gaussian move/turn head squashed into [-1, 1].

    ``obs_dim`` must match the env's observation width; a mismatch raises
    ``ConfigurationError`` here rather than a shape error on the first tick.
    """

    def __init__(self, obs_dim: int, action_dim: int = ACTION_DIM, hidden_dim: int = 64):
        super().__init__()
        check_obs_dim(obs_dim)
        self.obs_dim = int(obs_dim)
        self.action_dim = int(action_dim)

        self.encoder = nn.Sequential(
            nn.Linear(self.obs_dim, hidden_dim),
            nn.Tanh(),
            nn.Linear(hidden_dim, hidden_dim),
            nn.Tanh(),
        )
        self.actor_mean = nn.Linear(hidden_dim, self.action_dim)
        self.actor_logstd = nn.Parameter(torch.zeros(self.action_dim))
        self.critic = nn.Linear(hidden_dim, 1)

        for layer, gain in ((self.actor_mean, 0.01), (self.critic, 1.0)):
            nn.init.orthogonal_(layer.weight, gain=gain)
            nn.init.zeros_(layer.bias)

    def _heads(self, obs: torch.Tensor) -> tuple[torch.distributions.Normal, torch.Tensor]:
        features = self.encoder(obs.float())
        mean = self.actor_mean(features)
        dist = torch.distributions.Normal(mean, self.actor_logstd.exp().expand_as(mean))
        return dist, self.critic(features).squeeze(-1)

    def get_action_and_value(
        self, obs: torch.Tensor, action: torch.Tensor | None = None
    ) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        obs: [batch, obs_dim]
        action: optional [batch, action_dim] already in [-1, 1]

        Returns (action, log_prob, entropy estimate, value), each batched.
        """
        dist, value = self._heads(obs)
        if action is None:
            pre = dist.rsample()
            action = torch.tanh(pre)
        else:
            action = action.float()
            pre = _unsquash(action)

        correction = _squash_correction(action)
        logprob = dist.log_prob(pre).sum(-1) - correction
        entropy = dist.entropy().sum(-1) + correction
        return action, logprob, entropy, value

    @torch.no_grad()
    def get_value(self, obs: torch.Tensor) -> torch.Tensor:
        return self._heads(obs)[1]

    @torch.no_grad()
    def act(self, obs: np.ndarray) -> np.ndarray:
        """Greedy [move, turn] for one observation, so the model can drive ParkingEnv directly."""
        x = torch.as_tensor(np.asarray(obs, dtype=np.float32)).reshape(1, self.obs_dim)
        dist, _ = self._heads(x)
        return torch.tanh(dist.mean).squeeze(0).cpu().numpy().astype(np.float32)
