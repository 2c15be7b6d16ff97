"""
Example: Interactive Motorcycle Suspension Simulation

Opens a pygame window with the default motorcycle rig resting above the
ground and lets you poke at it:

- SPACE: start / pause the physics
- R: rebuild the rig from the current parameters
- UP / DOWN: lengthen / shorten the head tube by 1 cm (rebuilds the rig;
  invalid frames are rejected and the current rig stays)
- Left mouse button: drag any part of the motorcycle

Optionally pass a JSON parameter file (see save_parameters()) as the only
argument.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging
import pygame
from pymotorig import DEFAULT_PARAMETERS, RigError, Simulation, load_parameters


WINDOW_SIZE = (1000, 700)
FPS = 60
HEAD_TUBE_STEP = 0.01


def draw_status(screen, font, sim):
    rig = sim.rig
    lines = [
        f"{'RUNNING' if sim.running else 'PAUSED'}  t = {sim.time:6.2f} s",
        f"Fork travel: {rig.bottom_fork.state.get('travel', 0.0) * 1000:6.1f} mm",
        f"Swingarm angle: {rig.swingarm.state.get('angle', 0.0):+.3f} rad",
        f"Head tube: {sim.parameters.get('frame', 'head_tube_length').value:.3f} m",
    ]
    for i, line in enumerate(lines):
        screen.blit(font.render(line, True, (0, 0, 0)), (10, 10 + i * 20))


def main():
    logging.basicConfig(level=logging.INFO)

    parameters = DEFAULT_PARAMETERS
    if len(sys.argv) > 1:
        parameters = load_parameters(sys.argv[1])
        print(f"Loaded parameters from {sys.argv[1]}")

    pygame.init()
    screen = pygame.display.set_mode(WINDOW_SIZE)
    pygame.display.set_caption("pymotorig")
    font = pygame.font.Font(None, 22)
    clock = pygame.time.Clock()

    sim = Simulation(surface=screen)
    sim.create_world(parameters)

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_SPACE:
                    sim.set_running(not sim.running)
                elif event.key == pygame.K_r:
                    sim.reset()
                elif event.key in (pygame.K_UP, pygame.K_DOWN):
                    step = HEAD_TUBE_STEP if event.key == pygame.K_UP else -HEAD_TUBE_STEP
                    current = sim.parameters.get('frame', 'head_tube_length').value
                    try:
                        sim.apply_parameter('frame', 'head_tube_length', current + step)
                    except RigError as e:
                        print(f"Rejected: {e}")
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                sim.pointer_down(sim.screen_to_world(event.pos))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                sim.pointer_up()
            elif event.type == pygame.MOUSEMOTION:
                sim.pointer_move(sim.screen_to_world(event.pos))

        sim.step()
        draw_status(screen, font, sim)
        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()


if __name__ == "__main__":
    main()
