import pygame

from catbar.constants import CAT_PALETTES, DEFAULT_COMPANION, PIXEL_SIZE
from catbar.models import CompanionId, Direction, SpeedState

# Side-on pixel cat, head on the left. 0 = transparent, 1 = fur, 4 = eye, 5 = nose
RUN_FRAMES = [
    # front legs out, back legs pushing off
    ["001100000000000",
     "011110000000110",
     "014110000001111",
     "001510000000110",
     "001111111111100",
     "000111111111000",
     "000111111110000",
     "000100001000000",
     "001100000100000"],
    # legs gathered
    ["001100000000000",
     "011110000000011",
     "014110000000111",
     "001510000001110",
     "001111111111000",
     "000111111110000",
     "000111111100000",
     "000011110000000",
     "000010010000000"],
    # airborne
    ["001100000000000",
     "011110000000001",
     "014110000000011",
     "001510000000110",
     "001111111111100",
     "000111111111000",
     "000011111100000",
     "000110001100000",
     "001000000010000"],
    # back legs out, front legs tucked
    ["001100000000000",
     "011110000000110",
     "014110000000111",
     "001510000001100",
     "001111111111000",
     "000111111110000",
     "000111111100000",
     "000010000110000",
     "000010000011000"],
]

# Lying down, flicking its tail
REST_FRAMES = [
    ["000000000000000",
     "000000000000000",
     "001100000000000",
     "011110000000000",
     "014110000000000",
     "001511111111000",
     "001111111111100",
     "000111111111110",
     "000000000000000"],
    ["000000000000000",
     "000000000000000",
     "001100000000000",
     "011110000000010",
     "014110000000010",
     "001511111111100",
     "001111111111100",
     "000111111111100",
     "000000000000000"],
]

# Fur pixels recoloured as markings (stripes / patches): (row, col)
MARKINGS = {(4, 6), (4, 7), (5, 6), (5, 9), (5, 10), (6, 8)}

FRAME_WIDTH = 15
FRAME_HEIGHT = 9


def render_grid(grid, palette, pixel_size=PIXEL_SIZE):
    """Draws a pixel grid onto a transparent surface."""
    surface = pygame.Surface((FRAME_WIDTH * pixel_size, FRAME_HEIGHT * pixel_size), pygame.SRCALPHA)
    for row_index, row in enumerate(grid):
        for col_index, code in enumerate(row):
            pixel = int(code)
            if pixel == 0:
                continue
            if pixel == 1 and (row_index, col_index) in MARKINGS:
                pixel = 2
            color = palette.get(pixel)
            if color is None:
                continue
            surface.fill(color, (col_index * pixel_size, row_index * pixel_size, pixel_size, pixel_size))
    return surface


class PixelCatFrames:
    """Frame-image provider keyed by (speed state, direction, frame index).

    Frames come from the built-in pixel grids, or from a sprite sheet when one
    is given (row 0: rest frames, row 1: run frames, cells of 15x9 pixels
    scaled by `pixel_size`). Right-facing frames are mirrored copies.
    """
    def __init__(self, companion=DEFAULT_COMPANION, pixel_size=PIXEL_SIZE, sheet_path=""):
        self.pixel_size = pixel_size
        self.sheet_path = sheet_path
        self.companion = None
        self._frames = {}
        self.set_companion(companion)

    def set_companion(self, companion):
        companion = CompanionId(companion)
        if companion == self.companion:
            return
        self.companion = companion
        rest, run = None, None
        if self.sheet_path:
            rest, run = self._load_sheet(self.sheet_path)
        if rest is None:
            palette = CAT_PALETTES.get(companion.value, CAT_PALETTES[DEFAULT_COMPANION])
            rest = [render_grid(grid, palette, self.pixel_size) for grid in REST_FRAMES]
            run = [render_grid(grid, palette, self.pixel_size) for grid in RUN_FRAMES]
        self._frames = {}
        for state in SpeedState:
            left = rest if state == SpeedState.STOPPED else run
            self._frames[(state, Direction.LEFT)] = left
            self._frames[(state, Direction.RIGHT)] = [pygame.transform.flip(s, True, False) for s in left]

    def _load_sheet(self, path):
        try:
            sheet = pygame.image.load(path)
        except (pygame.error, FileNotFoundError) as e:
            print(f"Warning: Could not load sprite sheet {path}: {e}")
            return None, None
        cell_w = FRAME_WIDTH * self.pixel_size
        cell_h = FRAME_HEIGHT * self.pixel_size
        rows = []
        for row in range(2):
            frames = []
            for col in range(sheet.get_width() // cell_w):
                rect = pygame.Rect(col * cell_w, row * cell_h, cell_w, cell_h)
                if rect.bottom > sheet.get_height():
                    break
                frames.append(sheet.subsurface(rect).copy())
            rows.append(frames)
        if not rows[0] or not rows[1]:
            print(f"Warning: Sprite sheet {path} is too small, using built-in frames")
            return None, None
        return rows[0], rows[1]

    def frame_count(self, speed_state):
        return len(self._frames.get((speed_state, Direction.LEFT), []))

    def get_frame(self, speed_state, direction, frame_index):
        frames = self._frames.get((speed_state, direction))
        if not frames or not 0 <= frame_index < len(frames):
            return None
        return frames[frame_index]
