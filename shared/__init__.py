"""
Shared Kernel

Building blocks reused by every Careline app: interval value objects,
domain errors, the unit of work and the in-process message bus.
"""
