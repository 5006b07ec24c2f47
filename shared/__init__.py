"""Constants, exceptions, config types and numeric helpers shared across packages."""
