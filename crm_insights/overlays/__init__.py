"""User overlays (inactivity justifications and contact logs)."""

from crm_insights.overlays.store import OverlayStore

__all__ = ["OverlayStore"]
