"""
Pygame renderer for the game engine.

Draws the board grid (falling piece included, since the engine draws it
into the board), a next-piece preview, and a sidebar with points, best
score, lines, speed, and sound state. Title, pause, and game-over screens
are drawn as overlays on top of the board.
"""

from __future__ import annotations

import pygame

from tetris_engine.game.board import Tile
from tetris_engine.game.pieces import Piece
from tetris_engine.game.tetris import EngineSnapshot, GameState


# ── Color constants ───────────────────────────────────────────────────────
BACKGROUND_COLOR = (30, 30, 30)
GRID_LINE_COLOR = (60, 60, 60)
BORDER_COLOR = (200, 200, 200)
TEXT_COLOR = (255, 255, 255)
DIM_TEXT_COLOR = (150, 150, 150)
SIDEBAR_BG_COLOR = (20, 20, 20)
EMPTY_CELL_COLOR = (40, 40, 40)
FILLED_CELL_COLOR = (158, 173, 134)
OVERLAY_ALPHA = 150


class TetrisRenderer:
    """Pygame-based renderer for engine snapshots.

    The window is divided into:
      - Left: board area (cell_size * width) x (cell_size * height)
      - Right: sidebar with next piece, points, best, lines, speed, sound

    Attributes:
        width: Board columns.
        height: Board rows.
        cell_size: Pixel size of each grid cell.
        max_points: Displayed points are capped at this value.
        board_pixel_width: Pixel width of the board area.
        board_pixel_height: Pixel height of the board area.
        sidebar_width: Pixel width of the sidebar.
        screen: Pygame display surface (created on first render).
    """

    SIDEBAR_WIDTH_CELLS: int = 7

    def __init__(
        self,
        width: int,
        height: int,
        cell_size: int = 30,
        max_points: int = 999999,
    ) -> None:
        """Initialize the renderer.

        Does NOT create the Pygame window yet — that happens on the first
        call to render().
        """
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.max_points = max_points

        self.board_pixel_width = cell_size * width
        self.board_pixel_height = cell_size * height
        self.sidebar_width = cell_size * self.SIDEBAR_WIDTH_CELLS
        self.window_width = self.board_pixel_width + self.sidebar_width
        self.window_height = self.board_pixel_height

        self.screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._font: pygame.font.Font | None = None
        self._initialized: bool = False

    def render(self, snapshot: EngineSnapshot, fps: int = 60, show_logo: bool = False) -> int:
        """Draw a snapshot to the screen.

        Args:
            snapshot: Engine state to draw.
            fps: Target frames per second for the display clock.
            show_logo: Draw the title overlay (the engine's ``is_showing_logo``).

        Returns:
            Milliseconds since the previous frame.
        """
        if not self._initialized:
            self._init_pygame()

        self.screen.fill(BACKGROUND_COLOR)
        self._draw_board(snapshot)
        self._draw_sidebar(snapshot)
        pygame.draw.rect(
            self.screen,
            BORDER_COLOR,
            (0, 0, self.board_pixel_width, self.board_pixel_height),
            2,
        )

        if snapshot.game_state is GameState.OVER:
            self._draw_overlay("GAME OVER", ["Press R to reset", "Press ESC to quit"], (255, 50, 50))
        elif snapshot.game_state is GameState.PAUSED:
            self._draw_overlay("PAUSED", ["Press SPACE to resume"])
        elif show_logo:
            self._draw_overlay("TETRIS", ["Press SPACE to start"])

        pygame.display.flip()
        return self._clock.tick(fps)

    def _init_pygame(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption("Tetris")
        self._clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 20)
        self._large_font = pygame.font.SysFont("monospace", 36, bold=True)
        self._small_font = pygame.font.SysFont("monospace", 16)
        self._initialized = True

    def _draw_cell(self, x: int, y: int, size: int, filled: bool) -> None:
        if filled:
            pygame.draw.rect(self.screen, FILLED_CELL_COLOR, (x, y, size, size))
            # Slightly darker border for a 3D effect
            darker = tuple(max(0, c - 40) for c in FILLED_CELL_COLOR)
            pygame.draw.rect(self.screen, darker, (x, y, size, size), 1)
        else:
            pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, (x, y, size, size))
            pygame.draw.rect(self.screen, GRID_LINE_COLOR, (x, y, size, size), 1)

    def _draw_board(self, snapshot: EngineSnapshot) -> None:
        grid = snapshot.board
        for row in range(self.height):
            for col in range(self.width):
                self._draw_cell(
                    col * self.cell_size,
                    row * self.cell_size,
                    self.cell_size,
                    grid[row, col] == Tile.FILLED,
                )

    def _draw_sidebar(self, snapshot: EngineSnapshot) -> None:
        sidebar_x = self.board_pixel_width
        pygame.draw.rect(
            self.screen,
            SIDEBAR_BG_COLOR,
            (sidebar_x, 0, self.sidebar_width, self.window_height),
        )
        pygame.draw.line(
            self.screen,
            BORDER_COLOR,
            (sidebar_x, 0),
            (sidebar_x, self.window_height),
            2,
        )

        text_x = sidebar_x + 15
        self._draw_piece_preview(snapshot.next, text_x, 20, "NEXT")

        text_y = 170
        rows = [
            ("POINTS", str(min(snapshot.points, self.max_points))),
            ("BEST", str(min(snapshot.best_score, self.max_points))),
            ("LINES", str(snapshot.cleared_lines)),
            ("SPEED", str(snapshot.current_speed)),
        ]
        for label, value in rows:
            self._draw_text(label, text_x, text_y)
            self._draw_text(value, text_x, text_y + 25)
            text_y += 60

        sound = "SOUND ON" if snapshot.sound else "SOUND OFF"
        self._draw_text(sound, text_x, text_y, DIM_TEXT_COLOR, self._small_font)

    def _draw_piece_preview(self, piece: Piece, x_offset: int, y_offset: int, label: str) -> None:
        preview_cell = self.cell_size * 2 // 3
        box_size = preview_cell * 5

        self._draw_text(label, x_offset, y_offset)
        box_y = y_offset + 25
        pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, (x_offset, box_y, box_size, box_size))
        pygame.draw.rect(self.screen, BORDER_COLOR, (x_offset, box_y, box_size, box_size), 1)

        cells = piece.kind.layouts[0]
        top = min(r for r, _ in cells)
        left = min(c for _, c in cells)
        rows = max(r for r, _ in cells) - top + 1
        cols = max(c for _, c in cells) - left + 1

        # Center the piece in the preview box
        offset_x = x_offset + (box_size - cols * preview_cell) // 2
        offset_y = box_y + (box_size - rows * preview_cell) // 2
        color = piece.kind.color
        darker = tuple(max(0, cv - 40) for cv in color)
        for r, c in cells:
            px = offset_x + (c - left) * preview_cell
            py = offset_y + (r - top) * preview_cell
            pygame.draw.rect(self.screen, color, (px, py, preview_cell, preview_cell))
            pygame.draw.rect(self.screen, darker, (px, py, preview_cell, preview_cell), 1)

    def _draw_overlay(
        self,
        title: str,
        lines: list[str],
        title_color: tuple[int, int, int] = TEXT_COLOR,
    ) -> None:
        """Draw a semi-transparent overlay over the board with centered text."""
        overlay = pygame.Surface(
            (self.board_pixel_width, self.board_pixel_height), pygame.SRCALPHA
        )
        overlay.fill((0, 0, 0, OVERLAY_ALPHA))
        self.screen.blit(overlay, (0, 0))

        cx = self.board_pixel_width // 2
        cy = self.board_pixel_height // 2
        text = self._large_font.render(title, True, title_color)
        self.screen.blit(text, (cx - text.get_width() // 2, cy - 40))
        for i, line in enumerate(lines):
            text = self._small_font.render(line, True, TEXT_COLOR)
            self.screen.blit(text, (cx - text.get_width() // 2, cy + 10 + 30 * i))

    def _draw_text(
        self,
        text: str,
        x: int,
        y: int,
        color: tuple[int, int, int] = TEXT_COLOR,
        font: pygame.font.Font | None = None,
    ) -> None:
        surface = (font or self._font).render(text, True, color)
        self.screen.blit(surface, (x, y))

    def close(self) -> None:
        """Shut down Pygame and close the window."""
        if self._initialized:
            pygame.quit()
            self._initialized = False
