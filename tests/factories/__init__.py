"""
Test Factories Module

Factory functions for writing configuration files into temporary directories.
"""

from .config_factories import (
    make_config,
    make_nested_config,
    temp_config_dir,
    write_config,
    write_python_config,
)

__all__ = [
    "make_config",
    "make_nested_config",
    "temp_config_dir",
    "write_config",
    "write_python_config",
]
