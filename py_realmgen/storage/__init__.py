"""
Persistence of generated world maps.
"""

from .json_file import load_world_map, save_world_map

__all__ = ['load_world_map', 'save_world_map']
