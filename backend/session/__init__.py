"""
Per-process map session: renderer, registry, highlight controller and feed merge,
all driven through one dispatcher thread.
"""
