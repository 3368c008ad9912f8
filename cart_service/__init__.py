"""Basket and order backend with switchable injected defects"""

__version__ = "1.0.0"
