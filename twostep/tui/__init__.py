"""TUI module for twostep login."""

from twostep.tui.app import TwoStepApp, run_tui

__all__ = ["TwoStepApp", "run_tui"]
