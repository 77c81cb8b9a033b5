from __future__ import annotations

import argparse

import gymnasium as gym
import numpy as np

# Ensure envs are registered
import polyfall.env  # noqa: F401


def run_random(steps: int = 200, seed: int | None = None) -> float:
    env = gym.make("Polyfall-20x40-v0")
    rng = np.random.default_rng(seed)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        # Prefer valid actions if available
        valid = np.flatnonzero(info["action_mask"])
        action = int(rng.choice(valid)) if valid.size > 0 else env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            print(f"episode {episodes}: score={info['score']} level={info['level']} "
                  f"lines={info['lines_cleared_total']}")
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}")
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=2000)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    run_random(args.steps, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
