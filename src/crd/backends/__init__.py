"""Backends for derived family output generation (Python, DOT)."""

from .dot_generator import DotMode, generate_dot, save_dot_file
from .python_generator import PythonMode, generate_python, save_python_file

__all__ = [
    "DotMode",
    "generate_dot",
    "save_dot_file",
    "PythonMode",
    "generate_python",
    "save_python_file",
]
