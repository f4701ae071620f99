"""
Cartographer - naturalness scoring of UI test expeditions.
"""
__version__ = "0.1.0"
