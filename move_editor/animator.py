"""
Keyed smooth-value animator used for radius easing and the playback clock.

Each key holds a linear transition toward a target. Callers pass the current
time explicitly, so results never depend on how often the redraw loop runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable


@dataclass
class _Transition:
    start_value: float
    target: float
    start_time: float
    duration: float

    def value_at(self, now: float) -> float:
        if self.duration <= 0.0:
            return self.target
        progress = (now - self.start_time) / self.duration
        progress = min(max(progress, 0.0), 1.0)
        return self.start_value + (self.target - self.start_value) * progress


@dataclass
class ValueAnimator:
    """
    Scalar values that move linearly toward their latest target.

    The first request for a key returns the target immediately. Requesting a
    different target starts a new transition from the current value that ends
    after ``duration`` seconds. A non-positive duration jumps to the target.
    """

    _transitions: Dict[Hashable, _Transition] = field(default_factory=dict, init=False)  # type: ignore[misc]

    def animate(self, key: Hashable, target: float, duration: float, now: float) -> float:
        """
        Return the current value for ``key`` while moving it toward ``target``.
        """
        target = float(target)
        transition = self._transitions.get(key)
        if transition is None:
            transition = _Transition(target, target, now, 0.0)
            self._transitions[key] = transition
        elif transition.target != target:
            transition = _Transition(transition.value_at(now), target, now, float(duration))
            self._transitions[key] = transition
        return transition.value_at(now)

    def forget(self, key: Hashable) -> None:
        """
        Drop the transition for ``key``; its next request starts at the target.
        """
        self._transitions.pop(key, None)
