"""
Particle Field - free-flight animation of falling snowflakes.

The field moves particles; the settling simulation only reads them and
reports which ones landed so the host can call ``respawn``.
"""

import logging
import math
import random
from typing import List, Optional

from .config import SnowIntensity
from .models import Particle

logger = logging.getLogger(__name__)

WIND_PHASE_STEP = 0.02
WIND_AMPLITUDE = 0.5
EDGE_MARGIN = 10.0


class ParticleField:
    """Snowflakes over a ``width`` x ``height`` area, y growing upward."""

    def __init__(self, width: float, height: float,
                 intensity: SnowIntensity = SnowIntensity.MEDIUM,
                 wind_enabled: bool = True,
                 rng: Optional[random.Random] = None):
        self.width = width
        self.height = height
        self.intensity = intensity
        self.wind_enabled = wind_enabled
        self.rng = rng or random.Random()
        self.wind_phase = 0.0
        self.particles: List[Particle] = []
        self._populate()

    def _new_particle(self, at_top: bool = False) -> Particle:
        rng = self.rng
        size = rng.uniform(2.0, 6.0)
        return Particle(
            x=rng.uniform(0.0, self.width),
            y=self.height if at_top else rng.uniform(0.0, self.height),
            size=size,
            speed=rng.uniform(1.0, 3.0) * (size / 6.0),
            drift=rng.uniform(-0.5, 0.5),
            opacity=rng.uniform(0.6, 1.0),
        )

    def _populate(self):
        self.particles = [self._new_particle() for _ in range(self.intensity.particle_count)]

    def set_intensity(self, intensity: SnowIntensity):
        """Switch intensity; rebuilds the particle list."""
        self.intensity = intensity
        self._populate()
        logger.info(f"Snow intensity set to {intensity.value} ({len(self.particles)} particles)")

    def set_wind_enabled(self, enabled: bool):
        self.wind_enabled = enabled

    def resize(self, width: float, height: float):
        """Adopt a new area; particles outside it are brought back in."""
        self.width = width
        self.height = height
        for particle in self.particles:
            if particle.x > width + EDGE_MARGIN:
                particle.x = self.rng.uniform(0.0, width)
            if particle.y > height:
                particle.y = self.rng.uniform(0.0, height)

    def respawn(self, index: int):
        """Replace particle ``index`` with a fresh one at the top edge."""
        self.particles[index] = self._new_particle(at_top=True)

    def wind_offset(self) -> float:
        return math.sin(self.wind_phase) * WIND_AMPLITUDE if self.wind_enabled else 0.0

    def step(self):
        """Advance every falling particle by one frame."""
        self.wind_phase += WIND_PHASE_STEP
        wind = self.wind_offset()

        for i, particle in enumerate(self.particles):
            if not particle.falling:
                continue
            particle.y -= particle.speed
            particle.x += particle.drift + wind

            if particle.y < -EDGE_MARGIN:
                self.respawn(i)
                continue

            if particle.x < -EDGE_MARGIN:
                particle.x = self.width + EDGE_MARGIN
            elif particle.x > self.width + EDGE_MARGIN:
                particle.x = -EDGE_MARGIN

    def __len__(self) -> int:
        return len(self.particles)
