"""
Product image analysis with Claude vision.

Each image URL is sent to the model with a JSON-only prompt; the JSON object
in the reply is extracted and sanitized. Without an API key, or after all
retries fail, a keyword analysis of the URL itself is returned instead.
"""
import asyncio
import json
import logging
import re
import time
from collections import OrderedDict
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any

import anthropic

from gamestore.core.config import settings

logger = logging.getLogger(__name__)

# ============================================================================
# CONFIGURATION
# ============================================================================

VISION_MODEL = "claude-haiku-4-5-20251001"
MAX_RETRIES = 2
CACHE_TTL_SECONDS = 30 * 60
CACHE_MAX_ENTRIES = 100
CACHE_MIN_CONFIDENCE = 0.7
CONCURRENCY_LIMIT = 3
FALLBACK_CONFIDENCE = 0.3

PRODUCT_TYPES = ['game', 'accessory', 'digital', 'console', 'other']
DESIGN_STYLES = ['modern', 'classic', 'gaming', 'minimalist']
RESOLUTIONS = ['high', 'medium', 'low']
LIGHTING = ['good', 'fair', 'poor']

ANALYSIS_PROMPT = """You are an expert product analyst specializing in gaming and entertainment products. Analyze the provided product image and extract detailed information.

Return a JSON object with this exact structure:
{
  "productType": "game|accessory|digital|console|other",
  "platformHints": ["playstation", "xbox", "nintendo", "pc", "mobile", "universal"],
  "visualFeatures": {
    "dominantColors": ["color1", "color2", "color3"],
    "designStyle": "modern|classic|gaming|minimalist",
    "branding": ["brand1", "brand2"],
    "keyElements": ["element1", "element2", "element3"]
  },
  "quality": {
    "resolution": "high|medium|low",
    "clarity": 0-100,
    "lighting": "good|fair|poor"
  },
  "confidence": 0-100
}

Focus on gaming-specific details: box art, platform branding, genre indicators,
age rating visuals, special edition indicators, digital vs physical cues.

Respond ONLY with valid JSON, no additional text."""


# ============================================================================
# RESULT TYPES
# ============================================================================

@dataclass
class VisualFeatures:
    dominant_colors: List[str] = field(default_factory=list)
    design_style: str = 'modern'
    branding: List[str] = field(default_factory=list)
    key_elements: List[str] = field(default_factory=list)


@dataclass
class ImageQuality:
    resolution: str = 'medium'
    clarity: float = 50
    lighting: str = 'fair'


@dataclass
class ImageAnalysisResult:
    product_type: str = 'other'
    platform_hints: List[str] = field(default_factory=list)
    visual_features: VisualFeatures = field(default_factory=VisualFeatures)
    quality: ImageQuality = field(default_factory=ImageQuality)
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ============================================================================
# PARSING
# ============================================================================

def _choice(value, allowed: List[str], default: str) -> str:
    return value if value in allowed else default


def _string_list(value, limit: Optional[int] = None) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [str(v) for v in value if v]
    return items[:limit] if limit else items


def _clamp(value, low: float, high: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def parse_analysis_response(text: str) -> ImageAnalysisResult:
    """
    Extract and sanitize the JSON object from a model reply.

    Raises:
        ValueError: no parseable JSON object in the reply
    """
    match = re.search(r'\{[\s\S]*\}', text or '')
    if not match:
        raise ValueError("No valid JSON found in response")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in response: {e}")

    visual = parsed.get('visualFeatures') or {}
    quality = parsed.get('quality') or {}

    # Models answer on a 0-100 scale; stored as 0-1
    confidence = _clamp(parsed.get('confidence'), 0, 100, 50)
    if confidence > 1:
        confidence = confidence / 100

    return ImageAnalysisResult(
        product_type=_choice(parsed.get('productType'), PRODUCT_TYPES, 'other'),
        platform_hints=[h.lower() for h in _string_list(parsed.get('platformHints'))],
        visual_features=VisualFeatures(
            dominant_colors=_string_list(visual.get('dominantColors'), 5),
            design_style=_choice(visual.get('designStyle'), DESIGN_STYLES, 'modern'),
            branding=_string_list(visual.get('branding'), 3),
            key_elements=_string_list(visual.get('keyElements'), 5),
        ),
        quality=ImageQuality(
            resolution=_choice(quality.get('resolution'), RESOLUTIONS, 'medium'),
            clarity=_clamp(quality.get('clarity'), 0, 100, 50),
            lighting=_choice(quality.get('lighting'), LIGHTING, 'fair'),
        ),
        confidence=round(confidence, 3),
    )


def fallback_analysis(image_url: str) -> ImageAnalysisResult:
    """Low-confidence guess from keywords in the URL"""
    url = (image_url or '').lower()
    product_type = 'other'
    platforms = ['universal']

    if any(k in url for k in ('playstation', 'ps4', 'ps5')):
        product_type, platforms = 'game', ['playstation']
    elif 'xbox' in url:
        product_type, platforms = 'game', ['xbox']
    elif 'nintendo' in url or 'switch' in url:
        product_type, platforms = 'game', ['nintendo']
    elif 'steam' in url or re.search(r'(^|[^a-z])pc([^a-z]|$)', url):
        product_type, platforms = 'game', ['pc']
    elif any(k in url for k in ('accessory', 'controller', 'headset')):
        product_type = 'accessory'
    elif any(k in url for k in ('digital', 'download', 'code')):
        product_type = 'digital'

    return ImageAnalysisResult(
        product_type=product_type,
        platform_hints=platforms,
        confidence=FALLBACK_CONFIDENCE,
    )


# ============================================================================
# CACHE
# ============================================================================

class AnalysisCache:
    """TTL cache keyed by image URL; the oldest entry is evicted when full"""

    def __init__(self, max_entries: int = CACHE_MAX_ENTRIES, ttl_seconds: float = CACHE_TTL_SECONDS):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._entries: "OrderedDict[str, tuple]" = OrderedDict()

    def get(self, key: str) -> Optional[ImageAnalysisResult]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        result, stored_at = entry
        if time.monotonic() - stored_at > self.ttl_seconds:
            del self._entries[key]
            return None
        return result

    def set(self, key: str, result: ImageAnalysisResult) -> None:
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = (result, time.monotonic())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# ============================================================================
# ANALYZER
# ============================================================================

class ImageAnalyzer:

    def __init__(
        self,
        client: Optional[anthropic.AsyncAnthropic] = None,
        api_key: Optional[str] = None,
        model: str = VISION_MODEL,
        max_retries: int = MAX_RETRIES,
        cache: Optional[AnalysisCache] = None
    ):
        self.api_key = settings.ANTHROPIC_API_KEY if api_key is None else api_key
        self._client = client
        self.model = model
        self.max_retries = max_retries
        self.cache = cache or AnalysisCache()

    @property
    def enabled(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key, timeout=settings.AI_TIMEOUT_SECONDS
            )
        return self._client

    async def _ask(self, image_url: str) -> str:
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=1000,
            temperature=0.3,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "image", "source": {"type": "url", "url": image_url}},
                    {"type": "text", "text": ANALYSIS_PROMPT},
                ],
            }]
        )
        return "".join(block.text for block in message.content if block.type == "text")

    async def analyze_image(self, image_url: str, use_cache: bool = True) -> ImageAnalysisResult:
        if use_cache:
            cached = self.cache.get(image_url)
            if cached is not None:
                logger.debug(f"Using cached image analysis for {image_url}")
                return cached

        if not self.enabled:
            logger.warning("No Anthropic API key configured, using URL-based image analysis")
            return fallback_analysis(image_url)

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                result = parse_analysis_response(await self._ask(image_url))
                if use_cache and result.confidence > CACHE_MIN_CONFIDENCE:
                    self.cache.set(image_url, result)
                logger.info(f"Image analysis completed (attempt {attempt}): {result.product_type}")
                return result
            except (anthropic.APIError, ValueError) as e:
                last_error = e
                logger.warning(f"Image analysis attempt {attempt} failed: {e}")
                if attempt < self.max_retries:
                    await asyncio.sleep(2 ** attempt)

        logger.error(f"All {self.max_retries} image analysis attempts failed: {last_error}")
        return fallback_analysis(image_url)

    async def analyze_images(self, image_urls: List[str]) -> List[ImageAnalysisResult]:
        """Analyze in chunks of CONCURRENCY_LIMIT, preserving input order"""
        results: List[ImageAnalysisResult] = []
        for start in range(0, len(image_urls), CONCURRENCY_LIMIT):
            chunk = image_urls[start:start + CONCURRENCY_LIMIT]
            results.extend(await asyncio.gather(*(self.analyze_image(url) for url in chunk)))
        return results

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> Dict[str, int]:
        return {"size": len(self.cache), "max_size": self.cache.max_entries}


_analyzer_instance: Optional[ImageAnalyzer] = None


def get_image_analyzer() -> ImageAnalyzer:
    global _analyzer_instance
    if _analyzer_instance is None:
        _analyzer_instance = ImageAnalyzer()
    return _analyzer_instance
