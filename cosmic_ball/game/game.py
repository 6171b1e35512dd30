# cosmic_ball/game/game.py
import sys, argparse, logging
import pygame
from pygame import K_SPACE, K_ESCAPE, K_r, K_n, K_LEFT, K_RIGHT, K_a, K_d
from .config import WIDTH, HEIGHT, FPS, HIGHSCORE_FILE, GAME_OVER_SCREEN_DELAY_MS
from .level import default_seed
from .physics import InputState
from .render import Renderer
from .simulation import Simulation
from .storage import HighScoreStore

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Cosmic Ball: endless vertical platformer")
    p.add_argument("--seed", type=int, default=None,
                   help="Level seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--log-level", default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--highscore-file", default=HIGHSCORE_FILE,
                   help="JSON file the high score is kept in.")
    return p.parse_args(argv)


def read_input() -> InputState:
    keys = pygame.key.get_pressed()
    return InputState({
        "ArrowLeft": bool(keys[K_LEFT]),
        "a": bool(keys[K_a]),
        "ArrowRight": bool(keys[K_RIGHT]),
        "d": bool(keys[K_d]),
    })


def quit_game(sim: Simulation):
    sim.save_high_score()
    logger.info("quit: score=%d high=%d", sim.score, sim.high_score)
    pygame.quit(); sys.exit()


def run(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pygame.init()
    pygame.display.set_caption("Cosmic Ball")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()

    store = HighScoreStore(args.highscore_file)
    sim = Simulation(WIDTH, HEIGHT, seed=default_seed(args.seed), store=store)
    renderer = Renderer(WIDTH, HEIGHT)

    started = False
    game_over_at = None   # sim clock (ms) when the game stopped

    while True:
        clock.tick(FPS)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                quit_game(sim)
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    quit_game(sim)
                if event.key == K_SPACE:
                    if not started:
                        started = True
                        sim.restart()
                    else:
                        sim.jump()
                if event.key == K_r and started and not sim.running:
                    # Restart SAME seed
                    logger.info("restart, same seed %s", sim.seed)
                    sim.restart()
                    game_over_at = None
                if event.key == K_n and started and not sim.running:
                    # Restart with NEW RANDOM seed
                    logger.info("restart, new random seed")
                    sim.restart(None)
                    game_over_at = None

        if not started:
            renderer.draw_title(screen, sim.high_score)
            pygame.display.flip()
            continue

        was_running = sim.running
        sim.tick(read_input())
        if was_running and not sim.running:
            game_over_at = sim.now()

        renderer.draw(screen, sim)
        if game_over_at is not None and sim.now() - game_over_at >= GAME_OVER_SCREEN_DELAY_MS:
            renderer.draw_game_over(screen, sim)

        pygame.display.flip()


if __name__ == "__main__":
    run()
