"""Lowering of a device target into its stub script and boot action."""
