# Views Package
# MVC View Layer

from .json_view import JsonView

__all__ = ["JsonView"]
