"""Game domain services: role dealing, resolution, timers and sessions.

This package holds the game engine proper. Socket handlers and HTTP routes
import from here, keeping transport concerns separated from core game
mechanics.
"""
from .registry import RoomRegistry
from .session import GameSession
