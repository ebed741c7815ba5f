"""
bridgeshell - desktop shell that supervises a companion bridge process
"""

__version__ = "0.1.0"
__logo__ = "🌉"
