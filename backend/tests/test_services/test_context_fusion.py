"""
Tests for title/image context fusion
"""
from gamestore.services.ai.context_fusion import (
    analyze_title, aggregate_analyses, fuse_context, detect_conflicts, FusionConfig,
)
from gamestore.services.ai.image_analyzer import ImageAnalysisResult, VisualFeatures, ImageQuality


def _analysis(product_type='game', platforms=None, confidence=0.9, elements=None, colors=None, clarity=80):
    return ImageAnalysisResult(
        product_type=product_type,
        platform_hints=platforms or [],
        visual_features=VisualFeatures(
            dominant_colors=colors or [],
            key_elements=elements or [],
        ),
        quality=ImageQuality(clarity=clarity),
        confidence=confidence,
    )


class TestAnalyzeTitle:

    def test_platform_and_category_from_title(self):
        info = analyze_title("إله الحرب", "God of War Ragnarok PS5 Game")

        assert info.platforms == ['playstation']
        assert info.category == 'game'
        assert info.audience == 'casual'
        assert 'game' in info.keywords
        assert info.confidence == 0.8

    def test_arabic_platform_names(self):
        assert analyze_title("يد تحكم بلايستيشن", "").platforms == ["playstation"]

    def test_collectors_and_features(self):
        info = analyze_title("", "Elden Ring Collector Edition Wireless")

        assert info.audience == 'collectors'
        assert 'wireless connectivity' in info.features

    def test_empty_title(self):
        info = analyze_title("", "")

        assert info.category == 'other'
        assert info.confidence == 0.2


class TestAggregate:

    def test_empty(self):
        summary = aggregate_analyses([])

        assert summary.product_type == 'other'
        assert summary.confidence == 0.0

    def test_merges_by_frequency_and_weights_clarity(self):
        # Arrange
        analyses = [
            _analysis('accessory', ['xbox'], 0.5, colors=['black', 'green'], clarity=40),
            _analysis('game', ['xbox', 'pc'], 1.0, colors=['green'], clarity=100),
        ]

        # Act
        summary = aggregate_analyses(analyses)

        # Assert
        assert summary.product_type == 'game'
        assert summary.platform_hints[0] == 'xbox'
        assert summary.dominant_colors[0] == 'green'
        assert summary.clarity == 80
        assert summary.confidence == 0.75


class TestFuseContext:

    def test_title_only(self):
        # Act
        context = fuse_context("إله الحرب", "God of War Ragnarok PS5 Game")

        # Assert
        assert context.primary_context == 'title'
        assert context.product_category == 'game'
        assert context.platforms == ['playstation']
        assert context.platform_specific['xbox'] is False
        assert context.key_features == ['Compatible with playstation']
        assert context.confidence == 0.48
        assert context.conflict_resolution is None

    def test_title_platform_wins_conflict(self):
        # Arrange: images look like an Xbox game
        analyses = [_analysis('game', ['xbox'], 0.9, elements=['game', 'box art'])]

        # Act
        context = fuse_context("إله الحرب", "God of War Ragnarok PS5 Game", analyses)

        # Assert
        assert context.platforms == ['playstation']
        assert context.conflict_resolution.type == 'platform-conflict'
        assert context.primary_context == 'title'

    def test_confident_images_decide_category(self):
        analyses = [_analysis('accessory', [], 0.8, elements=['controller'])]

        context = fuse_context("", "Wireless Controller", analyses)

        assert context.product_category == 'accessory'

    def test_balanced_when_scores_are_close(self):
        analyses = [_analysis('game', [], 1.0, elements=['game'])]

        context = fuse_context("", "Racing Game", analyses)

        assert context.primary_context == 'balanced'
        assert context.confidence == 0.88

    def test_visual_primary_with_visual_weight(self):
        analyses = [_analysis('console', [], 1.0, elements=['console'])]

        context = fuse_context("", "Console", analyses, FusionConfig(title_weight=0.2, visual_weight=0.8))

        assert context.primary_context == 'visual'

    def test_low_similarity_is_reported(self):
        title = analyze_title("", "Racing Game")
        visual = aggregate_analyses([_analysis('game', [], 0.9, elements=['car', 'track', 'helmet'])])

        conflicts = detect_conflicts(title, visual, has_images=True)

        assert [c.type for c in conflicts] == ['title-image-mismatch']
