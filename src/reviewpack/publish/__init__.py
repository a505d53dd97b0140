from .report import render_plan_text, render_score_report

__all__ = ["render_plan_text", "render_score_report"]
