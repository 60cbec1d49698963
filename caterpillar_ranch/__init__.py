"""Caterpillar Ranch - gamified discount and cart engine"""

__version__ = "1.0.0"
