# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core utilities shared by all sjob commands.

Provides configuration, logging, the sjob error hierarchy, helpers for
repeating and retrying operations, and miscellaneous conversions.
"""
