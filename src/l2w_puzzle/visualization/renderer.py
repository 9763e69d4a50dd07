from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import numpy as np
import pygame

from l2w_puzzle.constants import PIECE_COLORS, CellValue
from l2w_puzzle.machine import GameSnapshot, TransitionStage
from l2w_puzzle.placement.logic import Cell
from l2w_puzzle.state import Phase


Color = Tuple[int, int, int]

EMPTY: Color = (20, 20, 26)
PART_B_COLORS = {
    int(CellValue.RFB): (70, 130, 230),
    int(CellValue.LFB): (230, 150, 60),
    int(CellValue.PREFILLED): (90, 90, 90),
}
W_BLOCK_COLOR: Color = (90, 210, 120)
CONFLICT_COLOR: Color = (230, 60, 60)
BLOCKING_COLOR: Color = (240, 200, 60)


def _hex_to_rgb(color: str) -> Color:
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _color_for_value(v: int) -> Color:
    # Phase A grid: colour index, negative for the falling piece
    if v == 0:
        return EMPTY
    idx = abs(v) - 1
    if 0 <= idx < len(PIECE_COLORS):
        return _hex_to_rgb(PIECE_COLORS[idx])
    return (200, 200, 200)


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, panel_width: int = 220) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self.font: Optional[pygame.font.Font] = None

    def window_size(self, grid_size: int) -> Tuple[int, int]:
        board = grid_size * self.cell_size
        return board + self.margin * 3 + self.panel_width, board + self.margin * 2

    def cell_at(self, pos: Tuple[int, int], grid_size: int) -> Optional[Cell]:
        """Board cell under a screen position, None when off the board."""
        x, y = pos[0] - self.margin, pos[1] - self.margin
        if x < 0 or y < 0:
            return None
        row, col = y // self.cell_size, x // self.cell_size
        if row >= grid_size or col >= grid_size:
            return None
        return int(row), int(col)

    def counter_rects(self, grid_size: int) -> Tuple[pygame.Rect, pygame.Rect]:
        x0 = self.margin * 2 + grid_size * self.cell_size
        rfb = pygame.Rect(x0, self.margin + 120, self.panel_width, 60)
        lfb = pygame.Rect(x0, self.margin + 190, self.panel_width, 60)
        return rfb, lfb

    def _rect(self, row: int, col: int) -> pygame.Rect:
        return pygame.Rect(
            self.margin + col * self.cell_size,
            self.margin + row * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def _draw_cells(self, screen: pygame.Surface, cells: Iterable[Cell], color: Color, width: int = 2) -> None:
        for row, col in cells:
            pygame.draw.rect(screen, color, self._rect(row, col), width)

    def _text(self, screen: pygame.Surface, text: str, pos: Tuple[int, int], color: Color = (230, 230, 230)) -> None:
        if self.font is None:
            self.font = pygame.font.SysFont(None, 24)
        screen.blit(self.font.render(text, True, color), pos)

    def draw(
        self,
        screen: pygame.Surface,
        snap: GameSnapshot,
        preview: Optional[Tuple[List[Cell], bool]] = None,
    ) -> None:
        screen.fill((10, 10, 14))
        if snap.phase in (Phase.IDLE, Phase.PART_A, Phase.TRANSITION_AB):
            grid = snap.part_a_grid
            for y in range(grid.shape[0]):
                for x in range(grid.shape[1]):
                    pygame.draw.rect(screen, _color_for_value(int(grid[y, x])), self._rect(y, x))
        else:
            self._draw_part_b(screen, snap)
            if preview is not None:
                cells, valid = preview
                self._draw_cells(screen, cells, W_BLOCK_COLOR if valid else CONFLICT_COLOR)

        size = snap.part_a_grid.shape[0]
        x0 = self.margin * 2 + size * self.cell_size
        self._text(screen, f"Level {snap.level}   Score {snap.score}", (x0, self.margin))
        self._text(screen, f"W: {snap.w_count}", (x0, self.margin + 24))
        if snap.phase == Phase.PART_A and snap.next_piece_kind:
            self._text(screen, f"Next: {snap.next_piece_kind}", (x0, self.margin + 48))
        if snap.phase == Phase.PART_B:
            self._text(screen, f"Time {snap.time_remaining}", (x0, self.margin + 48))
        rfb_rect, lfb_rect = self.counter_rects(size)
        pygame.draw.rect(screen, PART_B_COLORS[int(CellValue.RFB)], rfb_rect, 2)
        pygame.draw.rect(screen, PART_B_COLORS[int(CellValue.LFB)], lfb_rect, 2)
        self._text(screen, f"RFB x {snap.rfb_count}", (rfb_rect.x + 10, rfb_rect.y + 20))
        self._text(screen, f"LFB x {snap.lfb_count}", (lfb_rect.x + 10, lfb_rect.y + 20))

        message = self._message(snap)
        if message:
            self._text(screen, message, (x0, self.margin + 280), (255, 220, 120))
        pygame.display.flip()

    def _draw_part_b(self, screen: pygame.Surface, snap: GameSnapshot) -> None:
        grid: np.ndarray = snap.part_b_grid
        for y in range(grid.shape[0]):
            for x in range(grid.shape[1]):
                color = PART_B_COLORS.get(int(grid[y, x]), EMPTY)
                pygame.draw.rect(screen, color, self._rect(y, x))
        for piece in snap.pieces:
            if piece.is_w_block:
                self._draw_cells(screen, piece.cells(), W_BLOCK_COLOR)
        self._draw_cells(screen, snap.blocking_cells, BLOCKING_COLOR)
        self._draw_cells(screen, snap.conflict_cells, CONFLICT_COLOR)

    @staticmethod
    def _message(snap: GameSnapshot) -> str:
        if snap.phase == Phase.IDLE:
            return "Enter: start"
        if snap.stage is None:
            return ""
        if snap.stage == TransitionStage.BUTTON:
            return "Enter: continue" if snap.phase != Phase.COMPLETE else "Enter: next level"
        return snap.stage.value
