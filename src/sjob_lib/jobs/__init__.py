# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from .presenter import JobsPresenter, JobsStatistics, ResourceCount

__all__ = ["JobsPresenter", "JobsStatistics", "ResourceCount"]
