"""
redpaper - find a fresh desktop wallpaper on reddit
"""

__version__ = "0.1.0"
