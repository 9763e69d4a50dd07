from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from l2w_puzzle.config import CompletionRule, GameConfig
from l2w_puzzle.constants import BlockType
from l2w_puzzle.machine import GameStateMachine
from l2w_puzzle.state import Phase
from .renderer import Renderer


# pygame keys -> DOM key names used by the keybinding table
KEY_NAMES: Dict[int, str] = {
    pygame.K_LEFT: "ArrowLeft",
    pygame.K_RIGHT: "ArrowRight",
    pygame.K_UP: "ArrowUp",
    pygame.K_DOWN: "ArrowDown",
    pygame.K_SPACE: " ",
}


def _on_enter(machine: GameStateMachine) -> None:
    if machine.phase == Phase.IDLE:
        machine.start()
    elif machine.phase == Phase.COMPLETE:
        machine.level_up()
    elif machine.phase in (Phase.TRANSITION_AB, Phase.TRANSITION_BA):
        machine.continue_()


def run(config: Optional[GameConfig] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        machine = GameStateMachine(config)
        size = machine.config.grid_size
        renderer = Renderer(cell_size=32)
        screen = pygame.display.set_mode(renderer.window_size(size))
        pygame.display.set_caption("L2W - Human Play")

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_RETURN:
                        _on_enter(machine)
                    elif event.key == pygame.K_r:
                        machine.restart()
                    elif event.key in KEY_NAMES:
                        machine.handle_key(KEY_NAMES[event.key])
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    if machine.phase != Phase.PART_B:
                        continue
                    rfb_rect, lfb_rect = renderer.counter_rects(size)
                    if rfb_rect.collidepoint(event.pos):
                        machine.drag.grab_counter(BlockType.RFB)
                    elif lfb_rect.collidepoint(event.pos):
                        machine.drag.grab_counter(BlockType.LFB)
                    else:
                        cell = renderer.cell_at(event.pos, size)
                        if cell is not None:
                            machine.drag.grab_board(*cell)
                elif event.type == pygame.MOUSEMOTION and machine.drag.drag is not None:
                    cell = renderer.cell_at(event.pos, size)
                    if cell is not None:
                        machine.drag.move_to(*cell)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    if machine.drag.drag is not None:
                        machine.drag.release(renderer.cell_at(event.pos, size))

            # Scheduler time follows the wall clock
            machine.advance(clock.tick(60))

            preview = machine.drag.preview()
            renderer.draw(
                screen,
                machine.snapshot(),
                (preview.cells, preview.result.ok) if preview is not None else None,
            )
    finally:
        pygame.quit()


def main() -> None:  # pragma: no cover
    parser = argparse.ArgumentParser(description="Play L2W with keyboard and mouse")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--permissive", action="store_true", help="Use the permissive Phase B completion rule")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = GameConfig(random_seed=args.seed)
    if args.permissive:
        config.completion_rule = CompletionRule.PERMISSIVE
    run(config)


if __name__ == "__main__":  # pragma: no cover
    main()
