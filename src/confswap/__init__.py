"""ConfSwap - confidential token swaps over FHE-encrypted amounts."""

__version__ = "0.1.0"
