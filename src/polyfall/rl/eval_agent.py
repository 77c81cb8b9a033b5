from __future__ import annotations

import argparse

import pygame

from polyfall.rl.train_ppo import make_env
from polyfall.visualization.renderer import Renderer


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo")
    p.add_argument("--model", type=str, required=True)
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--fps", type=int, default=10)
    p.add_argument("--seed", type=int, default=None)
    return p


def main() -> None:
    args = build_parser().parse_args()
    if args.algo == "maskable":
        from sb3_contrib import MaskablePPO as Algo
    else:
        from stable_baselines3 import PPO as Algo

    env = make_env(args.seed, resample=(args.algo == "ppo"))
    model = Algo.load(args.model, device="auto")
    game_env = env.unwrapped
    renderer = Renderer(game_env.config.colors)

    pygame.init()
    try:
        obs, info = env.reset(seed=args.seed)
        screen = pygame.display.set_mode(renderer.window_size(game_env.state.grid))
        pygame.display.set_caption("Polyfall - Agent Eval")
        clock = pygame.time.Clock()

        total_reward = 0.0
        steps = 0
        while steps < args.steps:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    return

            if args.algo == "maskable":
                action, _ = model.predict(obs, deterministic=True, action_masks=game_env.get_action_mask())
            else:
                action, _ = model.predict(obs, deterministic=True)

            obs, reward, terminated, truncated, info = env.step(int(action))
            total_reward += float(reward)
            steps += 1
            if terminated or truncated:
                print(f"episode end: score={info['score']} level={info['level']}")
                obs, info = env.reset()

            renderer.draw(screen, game_env.state)
            clock.tick(args.fps)
        print(f"{steps} steps, total reward {total_reward:.1f}")
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    main()
