"""API routers for funcall-server endpoints."""

from funcall_server.routers import capabilities, chat, health

__all__ = ["capabilities", "chat", "health"]
