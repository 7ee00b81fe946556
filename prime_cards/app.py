"""Pygame UI shell for Prime Cards.

The screen renders a ``ChallengeSnapshot`` and forwards clicks, starts, resets
and sidebar closes to the engine. Phase rules, timing and progress live in
prime_cards/challenge.py (core module); nothing here decides whether a click
counts.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from . import messages
from .challenge import ChallengeEngine, ChallengePhase, ChallengeSession, ChallengeSnapshot
from .clock import RealClock
from .config import LOG_LEVEL_ENV, ChallengeConfig
from .progress import CardStatus

logger = logging.getLogger(__name__)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


WINDOW_SIZE = (960, 640)
TARGET_FPS = 60

BG = (15, 23, 42)
PANEL_BG = (2, 6, 23)
PANEL_BORDER = (51, 65, 85)
TEXT_MAIN = (241, 245, 249)
TEXT_MUTED = (148, 163, 184)
ACCENT = (34, 211, 238)
AMBER = (251, 191, 36)
BUTTON_BG = (8, 145, 178)
ABANDON_BG = (225, 29, 72)
SECONDARY_BG = (71, 85, 105)
CARD_COLORS: dict[CardStatus, tuple[int, int, int]] = {
    CardStatus.NEUTRAL: (30, 41, 59),
    CardStatus.PRIME: (34, 197, 94),
    CardStatus.COMPOSITE: (239, 68, 68),
}

CARD_SIZE = 56
CARD_GAP = 8
SIDEBAR_W = 300
SCROLL_STEP = CARD_SIZE + CARD_GAP


class App:
    """Owns the window surface and the one screen shown in it."""

    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screen: Screen | None = None
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def show(self, screen: Screen) -> None:
        self._screen = screen

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if self._screen is not None:
            self._screen.handle_event(event)

    def render(self) -> None:
        if self._screen is not None:
            self._screen.render(self._surface)


class PrimeGridScreen:
    """Card grid + challenge panel + factor sidebar + completion modal."""

    def __init__(self, app: App, *, engine: ChallengeEngine) -> None:
        self._app = app
        self._engine = engine
        self._scroll_y = 0

        self._title_font = pygame.font.Font(None, 44)
        self._card_font = pygame.font.Font(None, 28)
        self._small_font = pygame.font.Font(None, 24)
        self._mid_font = pygame.font.Font(None, 34)
        self._big_font = pygame.font.Font(None, 64)

        # Hitboxes, refreshed during render.
        self._card_hitboxes: list[tuple[pygame.Rect, int]] = []
        self._button_hitboxes: list[tuple[pygame.Rect, MenuItem]] = []
        self._sidebar_rect: pygame.Rect | None = None
        self._sidebar_close_rect: pygame.Rect | None = None
        self._modal_hitboxes: list[tuple[pygame.Rect, MenuItem]] = []
        self._grid_rect = pygame.Rect(0, 0, 0, 0)
        self._content_h = 0
        self._hover: int | None = None
        # (session, prime); a hint never outlives the challenge it was asked in.
        self._hint: tuple[ChallengeSession, int] | None = None

    @property
    def engine(self) -> ChallengeEngine:
        return self._engine

    def card_rect(self, n: int) -> pygame.Rect | None:
        for rect, num in self._card_hitboxes:
            if num == n:
                return rect
        return None

    def button_rect(self, label: str) -> pygame.Rect | None:
        for rect, item in (*self._button_hitboxes, *self._modal_hitboxes):
            if item.label == label:
                return rect
        return None

    # Events

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return
        if event.type == pygame.MOUSEMOTION:
            pos = getattr(event, "pos", None)
            self._hover = None if pos is None else self._card_at(pos)
            return
        if event.type == pygame.MOUSEWHEEL:
            self._scroll(-int(event.y) * SCROLL_STEP)
            return
        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            pos = getattr(event, "pos", None)
            if pos is not None:
                self._handle_click(pos)

    def _handle_key(self, key: int) -> None:
        snap = self._engine.snapshot()
        if key == pygame.K_ESCAPE:
            if snap.sidebar_number is not None:
                self._engine.close_sidebar()
            elif snap.phase is ChallengePhase.IDLE:
                self._app.quit()
            else:
                self._reset()
        elif key in (pygame.K_UP, pygame.K_w):
            self._scroll(-SCROLL_STEP)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._scroll(SCROLL_STEP)
        elif key == pygame.K_PAGEUP:
            self._scroll(-self._grid_rect.h)
        elif key == pygame.K_PAGEDOWN:
            self._scroll(self._grid_rect.h)
        elif key == pygame.K_r and snap.phase is ChallengePhase.COMPLETED:
            self._engine.restart()
            self._scroll_y = 0
        elif key == pygame.K_h and snap.phase is ChallengePhase.RUNNING:
            remaining = self._engine.remaining_primes()
            session = self._engine.session
            self._hint = None if not remaining or session is None else (session, remaining[0])
        elif snap.phase is ChallengePhase.IDLE:
            # 1..9 pick a configured challenge size.
            idx = key - pygame.K_1
            sizes = self._engine.config.challenge_sizes
            if 0 <= idx < len(sizes):
                self._start(sizes[idx])

    def _handle_click(self, pos: tuple[int, int]) -> None:
        snap = self._engine.snapshot()

        if snap.phase is ChallengePhase.COMPLETED:
            # The modal swallows every click.
            for rect, item in self._modal_hitboxes:
                if rect.collidepoint(pos):
                    item.action()
                    return
            return

        if snap.sidebar_number is not None:
            if self._sidebar_close_rect is not None and self._sidebar_close_rect.collidepoint(pos):
                self._engine.close_sidebar()
                return
            if self._sidebar_rect is not None and not self._sidebar_rect.collidepoint(pos):
                # Backdrop click.
                self._engine.close_sidebar()
            return

        for rect, item in self._button_hitboxes:
            if rect.collidepoint(pos):
                item.action()
                return

        n = self._card_at(pos)
        if n is not None:
            self._engine.click(n)

    def _card_at(self, pos: tuple[int, int]) -> int | None:
        if not self._grid_rect.collidepoint(pos):
            return None
        for rect, n in self._card_hitboxes:
            if rect.collidepoint(pos):
                return n
        return None

    def _start(self, limit: int) -> None:
        self._engine.start(limit)
        self._scroll_y = 0

    def _reset(self) -> None:
        self._engine.reset()
        self._scroll_y = 0

    def _scroll(self, dy: int) -> None:
        max_scroll = max(0, self._content_h - self._grid_rect.h)
        self._scroll_y = max(0, min(max_scroll, self._scroll_y + int(dy)))

    # Rendering

    def render(self, surface: pygame.Surface) -> None:
        self._engine.update()
        snap = self._engine.snapshot()
        w, h = surface.get_size()
        surface.fill(BG)

        y = self._render_header(surface, w)
        y = self._render_challenge_panel(surface, snap, w, y)
        self._grid_rect = pygame.Rect(16, y, max(CARD_SIZE, w - 32), max(CARD_SIZE, h - y - 16))
        self._render_grid(surface, snap)

        self._sidebar_rect = None
        self._sidebar_close_rect = None
        if snap.sidebar_number is not None:
            self._render_sidebar(surface, snap)

        self._modal_hitboxes = []
        if snap.phase is ChallengePhase.COMPLETED:
            self._render_completion_modal(surface, snap)

    def _render_header(self, surface: pygame.Surface, w: int) -> int:
        title = self._title_font.render(messages.TITLE, True, ACCENT)
        surface.blit(title, title.get_rect(midtop=(w // 2, 12)))
        hint = self._small_font.render(messages.SUBTITLE, True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midtop=(w // 2, 12 + title.get_height() + 4)))
        return 12 + title.get_height() + 4 + hint.get_height() + 12

    def _render_challenge_panel(self, surface: pygame.Surface, snap: ChallengeSnapshot, w: int, top: int) -> int:
        panel = pygame.Rect(16, top, w - 32, 96)
        pygame.draw.rect(surface, PANEL_BG, panel, border_radius=10)
        pygame.draw.rect(surface, PANEL_BORDER, panel, 1, border_radius=10)

        header = self._mid_font.render(messages.CHALLENGE_HEADER, True, AMBER)
        surface.blit(header, header.get_rect(midtop=(panel.centerx, panel.y + 8)))

        self._button_hitboxes = []
        tally = self.tally_text()
        if tally is not None:
            tally_img = self._small_font.render(tally, True, TEXT_MUTED)
            surface.blit(tally_img, tally_img.get_rect(topright=(panel.right - 16, panel.y + 14)))
        row_y = panel.y + 8 + header.get_height() + 10
        if snap.phase is ChallengePhase.IDLE:
            items = [
                MenuItem(messages.challenge_button_label(size), lambda size=size: self._start(size))
                for size in self._engine.config.challenge_sizes
            ]
            self._layout_buttons(surface, items, panel.centerx, row_y, BUTTON_BG)
        else:
            timer_text = f"{messages.TIMER_LABEL}: {snap.elapsed_text}"
            found_text = f"{messages.FOUND_LABEL}: {messages.found_counter(snap.found_count, snap.total_primes)}"
            timer = self._mid_font.render(timer_text, True, CARD_COLORS[CardStatus.PRIME])
            found = self._mid_font.render(found_text, True, AMBER)
            surface.blit(timer, (panel.x + 24, row_y + 4))
            surface.blit(found, (panel.x + 48 + timer.get_width(), row_y + 4))
            abandon = MenuItem(messages.ABANDON, self._reset)
            label = self._small_font.render(abandon.label, True, TEXT_MAIN)
            rect = pygame.Rect(0, row_y, label.get_width() + 32, 32)
            rect.right = panel.right - 24
            self._draw_button(surface, rect, label, ABANDON_BG)
            self._button_hitboxes.append((rect, abandon))
        return panel.bottom + 12

    def _layout_buttons(
        self,
        surface: pygame.Surface,
        items: list[MenuItem],
        center_x: int,
        y: int,
        color: tuple[int, int, int],
        hitboxes: list[tuple[pygame.Rect, MenuItem]] | None = None,
    ) -> None:
        target = self._button_hitboxes if hitboxes is None else hitboxes
        labels = [self._small_font.render(item.label, True, TEXT_MAIN) for item in items]
        widths = [label.get_width() + 40 for label in labels]
        gap = 16
        x = center_x - (sum(widths) + gap * (len(widths) - 1)) // 2
        for item, label, bw in zip(items, labels, widths):
            rect = pygame.Rect(x, y, bw, 32)
            self._draw_button(surface, rect, label, color)
            target.append((rect, item))
            x += bw + gap

    @staticmethod
    def _draw_button(
        surface: pygame.Surface,
        rect: pygame.Rect,
        label: pygame.Surface,
        color: tuple[int, int, int],
    ) -> None:
        pygame.draw.rect(surface, color, rect, border_radius=8)
        surface.blit(label, label.get_rect(center=rect.center))

    def _render_grid(self, surface: pygame.Surface, snap: ChallengeSnapshot) -> None:
        area = self._grid_rect
        pygame.draw.rect(surface, PANEL_BG, area, border_radius=12)
        inner = area.inflate(-16, -16)
        cols = max(1, (inner.w + CARD_GAP) // (CARD_SIZE + CARD_GAP))
        rows = (snap.grid_size + cols - 1) // cols
        self._content_h = rows * (CARD_SIZE + CARD_GAP) - CARD_GAP + 16
        self._scroll(0)

        used_w = cols * (CARD_SIZE + CARD_GAP) - CARD_GAP
        left = inner.x + (inner.w - used_w) // 2
        first_row = self._scroll_y // (CARD_SIZE + CARD_GAP)
        last_row = min(rows - 1, (self._scroll_y + inner.h) // (CARD_SIZE + CARD_GAP))

        hint = self.hint_number
        self._card_hitboxes = []
        surface.set_clip(inner)
        try:
            for row in range(first_row, last_row + 1):
                for col in range(cols):
                    n = row * cols + col + 1
                    if n > snap.grid_size:
                        break
                    rect = pygame.Rect(
                        left + col * (CARD_SIZE + CARD_GAP),
                        inner.y + row * (CARD_SIZE + CARD_GAP) - self._scroll_y,
                        CARD_SIZE,
                        CARD_SIZE,
                    )
                    status = snap.card_status(n)
                    pygame.draw.rect(surface, CARD_COLORS[status], rect, border_radius=8)
                    color = TEXT_MUTED if status is CardStatus.NEUTRAL else TEXT_MAIN
                    text = self._card_font.render(str(n), True, color)
                    surface.blit(text, text.get_rect(center=rect.center))
                    if n == hint:
                        pygame.draw.rect(surface, AMBER, rect, 3, border_radius=8)
                    visible = rect.clip(inner)
                    if visible.w > 0 and visible.h > 0:
                        self._card_hitboxes.append((visible, n))
        finally:
            surface.set_clip(None)

        label = self.hover_label()
        if label is not None:
            tip = self._small_font.render(label, True, TEXT_MAIN)
            tip_rect = tip.get_rect(bottomright=(area.right - 12, area.bottom - 6))
            pygame.draw.rect(surface, PANEL_BG, tip_rect.inflate(12, 6), border_radius=6)
            surface.blit(tip, tip_rect)

    @property
    def hint_number(self) -> int | None:
        """Prime outlined by the H key; gone once found or the challenge ends."""
        if self._hint is None or self._engine.phase is not ChallengePhase.RUNNING:
            return None
        hinted_session, n = self._hint
        if hinted_session is not self._engine.session or n in hinted_session.found:
            return None
        return n

    def tally_text(self) -> str | None:
        clicks = self._engine.clicks
        if self._engine.phase is not ChallengePhase.IDLE or len(clicks) == 0:
            return None
        return messages.checked_tally(clicks.prime_count, clicks.composite_count)

    def hover_label(self) -> str | None:
        n = self._hover
        if n is None or n > self._engine.grid_size:
            return None
        return messages.card_label(n, self._engine.card_status(n))

    def _render_sidebar(self, surface: pygame.Surface, snap: ChallengeSnapshot) -> None:
        assert snap.sidebar_number is not None
        w, h = surface.get_size()
        self._dim(surface, 150)

        panel = pygame.Rect(w - SIDEBAR_W, 0, SIDEBAR_W, h)
        pygame.draw.rect(surface, PANEL_BG, panel)
        pygame.draw.line(surface, PANEL_BORDER, panel.topleft, panel.bottomleft, 1)
        self._sidebar_rect = panel

        title = self._mid_font.render(messages.SIDEBAR_TITLE, True, ACCENT)
        surface.blit(title, (panel.x + 20, panel.y + 20))
        close = self._mid_font.render("x", True, TEXT_MUTED)
        close_rect = pygame.Rect(panel.right - 48, panel.y + 14, 32, 32)
        surface.blit(close, close.get_rect(center=close_rect.center))
        self._sidebar_close_rect = close_rect

        y = panel.y + 20 + title.get_height() + 20
        for line in _wrap(self._small_font, messages.sidebar_intro(snap.sidebar_number), panel.w - 40):
            surface.blit(self._small_font.render(line, True, TEXT_MAIN), (panel.x + 20, y))
            y += self._small_font.get_linesize()
        y += 10

        x = panel.x + 20
        for factor in snap.sidebar_factors:
            chip = self._small_font.render(str(factor), True, TEXT_MAIN)
            chip_rect = pygame.Rect(x, y, chip.get_width() + 20, 28)
            if chip_rect.right > panel.right - 20:
                x = panel.x + 20
                y += 36
                chip_rect.topleft = (x, y)
            pygame.draw.rect(surface, SECONDARY_BG, chip_rect, border_radius=6)
            surface.blit(chip, chip.get_rect(center=chip_rect.center))
            x = chip_rect.right + 8
        y += 44

        for a, b in snap.sidebar_pairs:
            pair = self._small_font.render(messages.pair_text(a, b), True, TEXT_MUTED)
            surface.blit(pair, (panel.x + 20, y))
            y += self._small_font.get_linesize()
        y += 16

        pygame.draw.line(surface, PANEL_BORDER, (panel.x + 20, y - 8), (panel.right - 20, y - 8), 1)
        for line in _wrap(self._small_font, messages.sidebar_note(snap.sidebar_number), panel.w - 40):
            surface.blit(self._small_font.render(line, True, TEXT_MUTED), (panel.x + 20, y))
            y += self._small_font.get_linesize()

    def _render_completion_modal(self, surface: pygame.Surface, snap: ChallengeSnapshot) -> None:
        assert snap.limit is not None
        w, h = surface.get_size()
        self._dim(surface, 150)

        box = pygame.Rect(0, 0, min(420, w - 40), 280)
        box.center = (w // 2, h // 2)
        pygame.draw.rect(surface, (30, 41, 59), box, border_radius=16)
        pygame.draw.rect(surface, ACCENT, box, 1, border_radius=16)

        y = box.y + 24
        title = self._mid_font.render(messages.COMPLETE_TITLE, True, AMBER)
        surface.blit(title, title.get_rect(midtop=(box.centerx, y)))
        y += title.get_height() + 12
        body = self._small_font.render(messages.complete_body(snap.limit), True, TEXT_MAIN)
        surface.blit(body, body.get_rect(midtop=(box.centerx, y)))
        y += body.get_height() + 16
        label = self._small_font.render(messages.RESULT_LABEL, True, TEXT_MUTED)
        surface.blit(label, label.get_rect(midtop=(box.centerx, y)))
        y += label.get_height() + 4
        result = self._big_font.render(snap.elapsed_text, True, CARD_COLORS[CardStatus.PRIME])
        surface.blit(result, result.get_rect(midtop=(box.centerx, y)))

        items = [
            MenuItem(messages.PLAY_AGAIN, self._engine.restart),
            MenuItem(messages.NEW_CHALLENGE, self._reset),
        ]
        self._layout_buttons(surface, items, box.centerx, box.bottom - 56, BUTTON_BG, self._modal_hitboxes)

    @staticmethod
    def _dim(surface: pygame.Surface, alpha: int) -> None:
        veil = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        veil.fill((0, 0, 0, alpha))
        surface.blit(veil, (0, 0))


def _wrap(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = word if current == "" else f"{current} {word}"
        if current and font.size(candidate)[0] > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper() or "WARNING"
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: ChallengeConfig | None = None,
) -> int:
    _configure_logging()
    cfg = ChallengeConfig.from_env() if config is None else config

    pygame.init()
    pygame.display.set_caption(messages.TITLE)
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()

    app = App(surface=surface)
    engine = ChallengeEngine(clock=RealClock(), config=cfg)
    app.show(PrimeGridScreen(app, engine=engine))
    logger.info("prime cards started with sizes %s", cfg.challenge_sizes)

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        # Leaving the loop mid-challenge must not leave a live tick behind.
        engine.reset()
        pygame.quit()

    return 0
