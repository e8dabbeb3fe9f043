"""
Nova Launch - token launchpad toolkit for Stellar/Soroban
"""

__version__ = "1.0.0"
