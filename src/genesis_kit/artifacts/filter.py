"""Selection of which artifact groups a bootstrap run emits."""

from __future__ import annotations

from dataclasses import dataclass

from genesis_kit.types import InvalidInputError

from .records import ArtifactCategory


@dataclass(frozen=True, slots=True)
class ArtifactFilter:
    """Set of enabled artifact categories. The default enables everything."""

    enabled: frozenset[ArtifactCategory] = frozenset(ArtifactCategory)

    @classmethod
    def parse(cls, selection: str | None) -> ArtifactFilter:
        """
        Parse a comma-separated category list such as `genesis,keys`.

        An empty or missing selection enables every category.

        Raises:
            InvalidInputError: If a name is not a known category.
        """
        names = [item.strip().lower() for item in (selection or "").split(",")]
        names = [name for name in names if name]
        if not names:
            return cls()

        enabled = set()
        for name in names:
            try:
                enabled.add(ArtifactCategory(name))
            except ValueError:
                choices = ", ".join(category.value for category in ArtifactCategory)
                raise InvalidInputError(
                    "artifact kind", f'"{name}". Must be one of: {choices}'
                ) from None
        return cls(frozenset(enabled))

    def includes(self, category: ArtifactCategory) -> bool:
        """Whether records of this category should be emitted."""
        return category in self.enabled
