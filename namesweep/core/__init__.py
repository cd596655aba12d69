"""
Core infrastructure for namesweep: logging, exceptions, configuration, paths.
"""
