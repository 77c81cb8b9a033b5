"""Gymnasium environments for Polyfall."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Full-size 20x40 field with the default gravity cadence
register(
    id="Polyfall-20x40-v0",
    entry_point="polyfall.env.polyfall_env:PolyfallEnv",
)

__all__ = ["Polyfall-20x40-v0"]
