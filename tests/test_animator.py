"""Keyed value animator."""

import pytest

from move_editor.animator import ValueAnimator


class TestValueAnimator:
    def test_first_request_returns_target(self):
        animator = ValueAnimator()
        assert animator.animate("r", 10.0, 0.1, now=0.0) == 10.0

    def test_eases_linearly_to_new_target(self):
        animator = ValueAnimator()
        animator.animate("r", 10.0, 0.1, now=0.0)
        assert animator.animate("r", 12.0, 0.1, now=1.0) == pytest.approx(10.0)
        assert animator.animate("r", 12.0, 0.1, now=1.05) == pytest.approx(11.0)
        assert animator.animate("r", 12.0, 0.1, now=1.2) == pytest.approx(12.0)

    def test_retarget_starts_from_current_value(self):
        animator = ValueAnimator()
        animator.animate("r", 0.0, 1.0, now=0.0)
        animator.animate("r", 10.0, 1.0, now=0.0)
        assert animator.animate("r", 0.0, 1.0, now=0.5) == pytest.approx(5.0)
        assert animator.animate("r", 0.0, 1.0, now=1.0) == pytest.approx(2.5)

    def test_zero_duration_jumps(self):
        animator = ValueAnimator()
        animator.animate("p", 3.0, 1.0, now=0.0)
        assert animator.animate("p", 0.0, 0.0, now=0.1) == 0.0

    def test_keys_are_independent(self):
        animator = ValueAnimator()
        animator.animate("a", 1.0, 0.1, now=0.0)
        animator.animate("b", 5.0, 0.1, now=0.0)
        assert animator.animate("a", 1.0, 0.1, now=1.0) == 1.0
        assert animator.animate("b", 5.0, 0.1, now=1.0) == 5.0

    def test_forget_restarts_at_target(self):
        animator = ValueAnimator()
        animator.animate("a", 1.0, 1.0, now=0.0)
        animator.forget("a")
        assert animator.animate("a", 9.0, 1.0, now=0.1) == 9.0
        animator.forget("missing")
