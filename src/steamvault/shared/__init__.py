"""Shared errors, logging and constants for SteamVault."""
