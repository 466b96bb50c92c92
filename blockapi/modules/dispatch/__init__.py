"""
Dispatch Module - Black Box Interface

Purpose: Run the handler that a request resolves to
Interface: Dispatcher.dispatch(), JsonResult, normalize_result(), render_result()
Hidden: Context construction, 404/405 decisions, handler error mapping
"""

from .dispatcher import Dispatcher
from .responses import HandlerResult, JsonResult, normalize_result, render_result

__all__ = ["Dispatcher", "HandlerResult", "JsonResult", "normalize_result", "render_result"]
