"""Encrypted balance viewing."""

from confswap.balance.decryptor import BalanceDecryptor, BalanceView

__all__ = ["BalanceDecryptor", "BalanceView"]
