# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab
