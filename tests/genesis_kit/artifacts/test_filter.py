"""Tests for artifact category selection."""

from __future__ import annotations

import pytest

from genesis_kit.artifacts import ArtifactCategory, ArtifactFilter
from genesis_kit.types import InvalidInputError


class TestArtifactFilter:
    """Parsing of comma-separated category lists."""

    @pytest.mark.parametrize("selection", [None, "", " , "])
    def test_empty_selects_everything(self, selection: str | None) -> None:
        artifact_filter = ArtifactFilter.parse(selection)
        assert all(artifact_filter.includes(category) for category in ArtifactCategory)

    def test_subset(self) -> None:
        artifact_filter = ArtifactFilter.parse(" Genesis, abis ")
        assert artifact_filter.enabled == {ArtifactCategory.GENESIS, ArtifactCategory.ABIS}
        assert not artifact_filter.includes(ArtifactCategory.KEYS)

    def test_unknown_kind(self) -> None:
        with pytest.raises(InvalidInputError, match='"widgets"'):
            ArtifactFilter.parse("genesis,widgets")
