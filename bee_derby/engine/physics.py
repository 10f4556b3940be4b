from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from .data_models import Box, Collider, CompetitorExtension, Vector


@dataclass(frozen=True)
class Alignment:
    """Coarse per-axis overlap flags between two world boxes."""

    top: bool
    bottom: bool
    left: bool
    right: bool

    @property
    def horizontal(self) -> bool:
        return self.left or self.right

    @property
    def vertical(self) -> bool:
        return self.top or self.bottom


def alignment_between(this: Box, other: Box) -> Alignment:
    """
    Tests whether one box's far edge lies within the other's span on each axis.

    This is not a separating-axis check: the x flags ignore the y extents and
    vice versa, so bodies in different lanes still count as x-aligned.
    """
    return Alignment(
        top=this.top >= other.top and this.y <= other.top,
        bottom=this.top >= other.y and this.y <= other.y,
        left=this.right >= other.right and this.x <= other.right,
        right=this.right >= other.x and this.x <= other.x,
    )


@dataclass(eq=False)
class MovingBody:
    """Kinematic body; decorations use ``collider=None, fixed=True``."""

    position: Vector
    velocity: Vector = field(default_factory=Vector)
    acceleration: Vector = field(default_factory=Vector)
    collider: Optional[Collider] = None
    fixed: bool = False
    name: str = ""
    competitor: Optional[CompetitorExtension] = None

    @property
    def is_competitor(self) -> bool:
        return self.competitor is not None

    def integrate(self, dt: float) -> None:
        self.velocity.x += self.acceleration.x * dt
        self.velocity.y += self.acceleration.y * dt
        self.position.x += self.velocity.x * dt
        self.position.y += self.velocity.y * dt

    def world_box(self) -> Optional[Box]:
        if self.collider is None:
            return None
        return self.collider.world_box(self.position)

    def resolve_collisions(self, others: Iterable["MovingBody"]) -> None:
        """
        Pushes this body out of every other collider it currently overlaps.

        Both boxes are measured once per pair before any correction. The x and
        y corrections are independent, so a diagonal overlap moves the body on
        both axes in the same call and may over-correct.
        """
        if self.collider is None or self.fixed:
            return

        for other in others:
            if other is self or other.collider is None:
                continue

            this_box = self.collider.world_box(self.position)
            other_box = other.collider.world_box(other.position)
            aligned = alignment_between(this_box, other_box)

            if aligned.horizontal:
                distance = other_box.x - this_box.x
                if this_box.x <= other_box.x <= this_box.right:
                    self.position.x -= this_box.width - distance
                if other_box.x <= this_box.x <= other_box.right:
                    self.position.x += this_box.width + distance
            if aligned.vertical:
                distance = other_box.y - this_box.y
                if this_box.y < other_box.y < this_box.top:
                    self.position.y -= this_box.height - distance
                if other_box.y < this_box.y < other_box.top:
                    self.position.y += this_box.height + distance

    def screen_position(self, surface_height: float, height: float) -> Tuple[float, float]:
        """Flips y for surfaces whose origin is the top-left corner."""
        return (self.position.x, surface_height - self.position.y - height)
