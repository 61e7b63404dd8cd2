"""
blocksort - Conveyor Block Sorting Robot
Camera, stepper belt and servo bucket controller for Raspberry Pi
"""

__version__ = "0.1.0"
__author__ = "Robot Sorter Team"

from blocksort.config import load_config

__all__ = ["load_config", "__version__"]
