"""Preprocessing subpackage exports."""

from ._winsorizer import Winsorizer

__all__ = ["Winsorizer"]
