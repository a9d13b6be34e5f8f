"""
Context fusion: combines what the product title says with what the image
analyses saw into one context for prompt generation and templates.
"""
import logging
import re
from collections import Counter
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any

from gamestore.services.ai.image_analyzer import ImageAnalysisResult

logger = logging.getLogger(__name__)

GAMING_KEYWORDS = [
    'game', 'gaming', 'playstation', 'xbox', 'nintendo', 'pc', 'mobile',
    'controller', 'accessory', 'headset', 'console', 'digital', 'physical',
    'edition', 'limited', 'collector', 'pro', 'elite', 'wireless', 'bluetooth',
]

# Word in a title -> platform
PLATFORM_WORDS = {
    'playstation': 'playstation', 'ps4': 'playstation', 'ps5': 'playstation', 'بلايستيشن': 'playstation',
    'xbox': 'xbox', 'اكسبوكس': 'xbox', 'إكسبوكس': 'xbox',
    'nintendo': 'nintendo', 'switch': 'nintendo', 'نينتندو': 'nintendo',
    'pc': 'pc', 'steam': 'pc',
    'mobile': 'mobile', 'android': 'mobile', 'ios': 'mobile',
}
PLATFORMS = ['playstation', 'xbox', 'nintendo', 'pc', 'mobile']

TITLE_CATEGORIES = ['game', 'accessory', 'digital', 'console', 'guide', 'subscription']

CATEGORY_COMPATIBILITY = {
    'game': ['game', 'digital'],
    'accessory': ['accessory'],
    'digital': ['digital', 'game'],
    'console': ['console'],
    'guide': ['digital'],
    'subscription': ['digital'],
}

PRIMARY_MARGIN = 0.1
VISUAL_CATEGORY_MIN_CONFIDENCE = 0.6


@dataclass
class FusionConfig:
    title_weight: float = 0.6
    visual_weight: float = 0.4
    conflict_threshold: float = 0.3


@dataclass
class ConflictResolution:
    type: str
    resolution: str
    explanation: str


@dataclass
class TitleAnalysis:
    keywords: List[str]
    platforms: List[str]
    category: str
    audience: str
    features: List[str]
    confidence: float


@dataclass
class VisualSummary:
    product_type: str = 'other'
    platform_hints: List[str] = field(default_factory=list)
    dominant_colors: List[str] = field(default_factory=list)
    design_style: str = 'modern'
    branding: List[str] = field(default_factory=list)
    key_elements: List[str] = field(default_factory=list)
    clarity: float = 50
    confidence: float = 0.0


@dataclass
class FusedContext:
    primary_context: str
    product_category: str
    target_audience: str
    key_features: List[str]
    platform_specific: Dict[str, bool]
    confidence: float
    conflict_resolution: Optional[ConflictResolution] = None

    @property
    def platforms(self) -> List[str]:
        return [p for p in PLATFORMS if self.platform_specific.get(p)]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _words(text: str) -> List[str]:
    return re.findall(r'\w+', text.lower())


def _has(words: List[str], *candidates: str) -> bool:
    return any(w in candidates or w.rstrip('s') in candidates for w in words)


# ============================================================================
# TITLE
# ============================================================================

def analyze_title(title: str, title_en: str) -> TitleAnalysis:
    words = _words(f"{title or ''} {title_en or ''}")

    keywords = [k for k in GAMING_KEYWORDS if _has(words, k)]

    platforms = []
    for word in words:
        platform = PLATFORM_WORDS.get(word)
        if platform and platform not in platforms:
            platforms.append(platform)

    category = next((c for c in TITLE_CATEGORIES if _has(words, c)), 'other')

    if _has(words, 'professional', 'business', 'pro'):
        audience = 'professional'
    elif _has(words, 'collector', 'limited', 'edition'):
        audience = 'collectors'
    else:
        audience = 'casual'

    features = []
    if _has(words, 'professional', 'business'):
        features.append('professional grade')
    if _has(words, 'wireless', 'bluetooth'):
        features.append('wireless connectivity')
    if _has(words, 'pro', 'elite'):
        features.append('premium features')
    if _has(words, 'digital', 'download'):
        features.append('digital delivery')
    if _has(words, 'physical', 'disc'):
        features.append('physical media')

    return TitleAnalysis(
        keywords=keywords,
        platforms=platforms,
        category=category,
        audience=audience,
        features=features,
        confidence=0.8 if words else 0.2,
    )


# ============================================================================
# IMAGES
# ============================================================================

def _merge_by_frequency(lists: List[List[str]], limit: int = 5) -> List[str]:
    counts = Counter(item for items in lists for item in items)
    return [item for item, _ in counts.most_common(limit)]


def aggregate_analyses(analyses: List[ImageAnalysisResult]) -> VisualSummary:
    if not analyses:
        return VisualSummary()

    best = max(analyses, key=lambda a: a.confidence)
    total_confidence = sum(a.confidence for a in analyses)
    clarity = (
        sum(a.quality.clarity * a.confidence for a in analyses) / total_confidence
        if total_confidence > 0 else 50
    )

    return VisualSummary(
        product_type=best.product_type,
        platform_hints=_merge_by_frequency([a.platform_hints for a in analyses]),
        dominant_colors=_merge_by_frequency([a.visual_features.dominant_colors for a in analyses]),
        design_style=best.visual_features.design_style,
        branding=_merge_by_frequency([a.visual_features.branding for a in analyses]),
        key_elements=_merge_by_frequency([a.visual_features.key_elements for a in analyses]),
        clarity=clarity,
        confidence=total_confidence / len(analyses),
    )


# ============================================================================
# FUSION
# ============================================================================

def _similarity(title: TitleAnalysis, visual: VisualSummary) -> float:
    """Jaccard index of title keywords and image key elements"""
    title_words = set(title.keywords)
    visual_words = {e.lower() for e in visual.key_elements}
    union = title_words | visual_words
    return len(title_words & visual_words) / len(union) if union else 0.0


def detect_conflicts(
    title: TitleAnalysis,
    visual: VisualSummary,
    has_images: bool,
    threshold: float = 0.3
) -> List[ConflictResolution]:
    conflicts = []

    visual_platforms = [p for p in visual.platform_hints if p in PLATFORMS]
    if title.platforms and visual_platforms and not set(title.platforms) & set(visual_platforms):
        conflicts.append(ConflictResolution(
            type='platform-conflict',
            resolution='Using the title platforms (prioritize title over images)',
            explanation=(
                f"Title suggests {', '.join(title.platforms)} "
                f"but images suggest {', '.join(visual_platforms)}"
            ),
        ))

    if title.category != 'other' and visual.product_type != 'other':
        if visual.product_type not in CATEGORY_COMPATIBILITY.get(title.category, []):
            conflicts.append(ConflictResolution(
                type='category-conflict',
                resolution='Prioritizing visual analysis for product type',
                explanation=f"Title suggests {title.category} but images show {visual.product_type}",
            ))

    if has_images and _similarity(title, visual) < threshold:
        conflicts.append(ConflictResolution(
            type='title-image-mismatch',
            resolution='Balancing both contexts',
            explanation='Low similarity between title content and image content',
        ))

    return conflicts


def _primary_context(title_score: float, visual_score: float) -> str:
    if visual_score > title_score + PRIMARY_MARGIN:
        return 'visual'
    if title_score > visual_score + PRIMARY_MARGIN:
        return 'title'
    return 'balanced'


def _target_audience(title: TitleAnalysis, visual: VisualSummary) -> str:
    if title.audience != 'casual':
        return title.audience
    elements = ' '.join(visual.key_elements).lower()
    if any(k in elements for k in ('professional', 'business', 'office')):
        return 'professional'
    if any(k in elements for k in ('collector', 'limited')):
        return 'collectors'
    return 'casual'


def _key_features(title: TitleAnalysis, visual: VisualSummary, platforms: List[str]) -> List[str]:
    features: List[str] = []
    candidates = list(title.features) + list(visual.key_elements)
    if platforms:
        candidates.append(f"Compatible with {', '.join(platforms)}")
    if visual.design_style != 'modern':
        candidates.append(f"{visual.design_style} design")

    for feature in candidates:
        if feature not in features:
            features.append(feature)
    return features[:8]


def fuse_context(
    title: str,
    title_en: str,
    analyses: Optional[List[ImageAnalysisResult]] = None,
    config: Optional[FusionConfig] = None
) -> FusedContext:
    """
    Merge title and image signals.

    Platforms named in the title always win over platforms seen in images;
    the product type seen in images wins when the images are confident.
    """
    config = config or FusionConfig()
    analyses = analyses or []

    title_info = analyze_title(title, title_en)
    visual = aggregate_analyses(analyses)
    conflicts = detect_conflicts(title_info, visual, bool(analyses), config.conflict_threshold)

    title_score = title_info.confidence * config.title_weight
    visual_score = visual.confidence * config.visual_weight

    if visual.product_type != 'other' and visual.confidence > VISUAL_CATEGORY_MIN_CONFIDENCE:
        category = visual.product_type
    else:
        category = title_info.category

    platforms = title_info.platforms or [p for p in visual.platform_hints if p in PLATFORMS]

    context = FusedContext(
        primary_context=_primary_context(title_score, visual_score),
        product_category=category,
        target_audience=_target_audience(title_info, visual),
        key_features=_key_features(title_info, visual, platforms),
        platform_specific={p: p in platforms for p in PLATFORMS},
        confidence=round(min(1.0, title_score + visual_score), 3),
        conflict_resolution=conflicts[0] if conflicts else None,
    )

    logger.debug(f"Context fusion: {context.primary_context}/{context.product_category} conf={context.confidence}")
    return context
