import asyncio
import os
import sys
from pathlib import Path

# --- ensure project root is importable ---
ROOT = Path(__file__).resolve().parents[1]
os.chdir(ROOT)
sys.path.insert(0, str(ROOT))

import pygame

from scenario_engine import build_interpreter, TimelineFeed, TweenValueDriver
from scenario_engine.steps import (
    callback, comment, delay, goto, hold, if_else, if_end, if_then, inc, label,
    move, parallel, resume, use, vibrate,
)


INITIAL = {"x": 0.0, "opacity": 0.0, "scale": 1.0}

BLOCKS = {
    "pulse": [
        move("scale", 1.3, 150, easing="out_quad"),
        move("scale", 1.0, 200, easing="in_out_sine"),
    ],
}

SCENARIO = [
    label("start"),
    comment("fade in"),
    move("opacity", 1.0, 400, "fadeIn"),
    use("pulse"),
    hold("waitSpace"),
    parallel([move("x", 300, 600), move("opacity", 0.5, 600)], "slide"),
    goto("flash"),
    vibrate("buzz"),
    if_then("is_far"),
    move("x", inc(-150), 300, "stepBack"),
    if_else(),
    move("x", inc(150), 300, "stepOn"),
    if_end(),
    delay(300),
    callback("announce", "lap done"),
    goto("start"),
    label("flash"),
    use("pulse"),
    resume(),
]


def main() -> int:
    pygame.init()
    pygame.display.set_caption("Scenario Preview - SPACE next / R reset / ESC quit")
    return asyncio.run(_run())


async def _run() -> int:
    screen = pygame.display.set_mode((900, 420))
    font = pygame.font.SysFont("consolas", 14)
    clock = pygame.time.Clock()

    flash = {"t": 0.0}

    def haptics() -> None:
        flash["t"] = 0.15

    driver = TweenValueDriver(INITIAL)
    interp = build_interpreter(
        SCENARIO,
        INITIAL,
        blocks=BLOCKS,
        callbacks={
            "is_far": lambda: driver.get("x") > 200,
            "announce": lambda text: print(f"[SCENARIO] {text}"),
        },
        loop=True,
        vibration_mode="always",
        driver=driver,
        haptics=haptics,
    )
    feed = TimelineFeed(interp.step_labels)
    feed.attach(interp.events)
    runner = asyncio.create_task(interp.start())

    running = True
    while running:
        dt = clock.tick(60) / 1000.0

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.KEYDOWN and e.key == pygame.K_ESCAPE:
                running = False
            elif e.type == pygame.KEYDOWN and e.key == pygame.K_SPACE:
                if interp.is_holding:
                    await interp.next_step()
            elif e.type == pygame.KEYDOWN and e.key == pygame.K_r:
                interp.reset()

        flash["t"] = max(0.0, flash["t"] - dt)
        screen.fill((60, 20, 20) if flash["t"] > 0 else (12, 12, 18))
        _draw_values(screen, font, interp.values)
        _draw_timeline(screen, font, feed.labels, feed.current_index)
        pygame.display.flip()

        # hand the loop to the interpreter between frames
        await asyncio.sleep(0)

    interp.stop()
    await runner
    pygame.quit()
    return 0


def _draw_values(screen: pygame.Surface, font: pygame.font.Font, values: dict) -> None:
    y = 20
    for name, value in values.items():
        screen.blit(font.render(f"{name:>8} {value:8.2f}", True, (220, 220, 220)), (10, y))
        width = int(max(0.0, min(1.0, abs(value) / 400.0 if name == "x" else abs(value) / 1.5)) * 600)
        pygame.draw.rect(screen, (90, 160, 255), pygame.Rect(180, y + 2, width, 12))
        y += 24


def _draw_timeline(screen: pygame.Surface, font: pygame.font.Font, labels: list, current: int) -> None:
    x, y = 10, 160
    for i, text in enumerate(labels):
        surf = font.render(text, True, (0, 0, 0) if i == current else (140, 140, 140))
        rect = pygame.Rect(x, y, surf.get_width() + 12, surf.get_height() + 6)
        if rect.right > screen.get_width() - 10:
            x, y = 10, y + rect.height + 6
            rect.topleft = (x, y)
        pygame.draw.rect(screen, (255, 215, 0) if i == current else (230, 230, 230), rect, border_radius=4)
        screen.blit(surf, (rect.x + 6, rect.y + 3))
        x = rect.right + 6


if __name__ == "__main__":
    raise SystemExit(main())
