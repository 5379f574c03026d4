from .overlay import HAND_CONNECTIONS, OverlayConfig, OverlayRenderer, hud_lines

__all__ = ["HAND_CONNECTIONS", "OverlayConfig", "OverlayRenderer", "hud_lines"]
