"""Character limits per platform and element weights in the ranking score."""

from __future__ import annotations

from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement, Platform

MAX_CHARACTERS: dict[Platform, dict[MetadataElement, int]] = {
    Platform.IOS: {
        MetadataElement.TITLE: 30,
        MetadataElement.SUBTITLE: 30,
        MetadataElement.DESCRIPTION: 4000,
    },
    Platform.ANDROID: {
        MetadataElement.TITLE: 50,
        MetadataElement.SUBTITLE: 80,      # Play short description
        MetadataElement.DESCRIPTION: 4000,
    },
}

# Description drives conversion, not ranking: weight 0 in the ranking score.
ELEMENT_WEIGHTS: dict[MetadataElement, float] = {
    MetadataElement.TITLE: 0.65,
    MetadataElement.SUBTITLE: 0.35,
    MetadataElement.DESCRIPTION: 0.0,
}


def max_characters(platform: Platform, element: MetadataElement) -> int:
    return MAX_CHARACTERS[platform][element]
