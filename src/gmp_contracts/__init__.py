"""Distinct GMP destination contract counts for Axelar mainnet and testnet."""

__version__ = "0.1.0"
