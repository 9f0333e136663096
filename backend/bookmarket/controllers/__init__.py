# Controllers package initialization
# This file makes the controllers directory a Python package
# and allows importing controller modules

from . import book_controller, health_controller, user_controller

__all__ = [
    "book_controller",
    "health_controller",
    "user_controller",
]
