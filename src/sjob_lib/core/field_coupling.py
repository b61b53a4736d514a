# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Mutually exclusive fields of a descriptor.

Some Slurm options exclude each other (e.g., `--mem` and `--mem-per-cpu`).
A `FieldCoupling` lists such fields ordered by dominance: if several of
them are set, only the most dominant one keeps its value.
"""

from typing import Any


class FieldCoupling:
    """
    Group of mutually exclusive attributes. Earlier attributes dominate later ones.
    """

    def __init__(self, *fields: str):
        if len(fields) < 2:
            raise ValueError("FieldCoupling requires at least two fields")
        self.fields = fields

    def __contains__(self, field_name: str) -> bool:
        return field_name in self.fields

    def __repr__(self) -> str:
        return f"FieldCoupling{self.fields}"

    def getDominantField(self, instance: Any) -> str | None:
        """Name of the most dominant field set on the instance, None if no field is set."""
        return next((f for f in self.fields if getattr(instance, f) is not None), None)

    def hasValue(self, instance: Any) -> bool:
        return self.getDominantField(instance) is not None

    def enforce(self, instance: Any) -> None:
        """Unset all coupled fields of the instance except the most dominant set one."""
        dominant = self.getDominantField(instance)
        for f in self.fields:
            if dominant is not None and f != dominant:
                setattr(instance, f, None)

    def takeFrom(self, *instances: Any) -> dict[str, Any]:
        """
        Values of all coupled fields of the first instance that sets any of them.

        The coupled fields are always taken together, so a field set in
        a more important instance is never combined with (or overridden by)
        another field of the coupling set in a less important one.

        Args:
            *instances: Objects ordered from the most important.

        Returns:
            dict[str, Any]: Value of every coupled field, None if no instance sets any.
        """
        source = next((i for i in instances if self.hasValue(i)), None)
        return {f: getattr(source, f) if source is not None else None for f in self.fields}


class CouplingRules:
    """All field couplings of a class."""

    def __init__(self, *couplings: FieldCoupling):
        self._couplings = couplings

    def __iter__(self):
        return iter(self._couplings)

    def enforce(self, instance: Any) -> None:
        for coupling in self._couplings:
            coupling.enforce(instance)

    def forField(self, field_name: str) -> FieldCoupling | None:
        """Return the coupling containing the field or None if the field is independent."""
        return next((c for c in self._couplings if field_name in c), None)
