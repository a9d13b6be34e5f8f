"""
Template-based Arabic descriptions used when no LLM output is available.

A template is picked by scoring the fused context, filled with the context's
features and platform details, then optionally personalized for the
audience and enriched with image-derived details (hybrid mode).
"""
import logging
import re
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional

from gamestore.services.ai.context_fusion import FusedContext

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = 'basic-game'
OVERVIEW_LABEL = 'نظرة عامة:'
HYBRID_OVERVIEW_LABEL = 'نظرة عامة (بناءً على الصور):'


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    summary: str
    overview: str
    features: List[str]
    technical_specs: List[str]
    tips: List[str]
    category: str


TEMPLATES: Dict[str, Template] = {t.id: t for t in [
    Template(
        id='basic-game',
        name='Basic Game Template',
        summary='منتج ألعاب عالي الجودة يوفر تجربة ممتعة',
        overview='منتج ألعاب متطور يجمع بين الجودة العالية والأداء المميز لتجربة غامرة وممتعة.',
        features=['رسومات عالية الدقة', 'لعب سلس', 'قصة مشوقة'],
        technical_specs=['دعم HD', '60 إطار في الثانية', 'صوت ستيريو'],
        tips=['قيمة ممتازة مقابل السعر', 'مناسبة للعب اليومي'],
        category='game',
    ),
    Template(
        id='premium-game',
        name='Premium Game Template',
        summary='منتج ألعاب فاخر من الفئة المميزة للاعبين المحترفين',
        overview='إصدار فاخر من الفئة المميزة مصمم للاعبين والجامعين الذين يبحثون عن أعلى جودة.',
        features=['رسومات واقعية', 'مؤثرات صوتية غامرة', 'محتوى إضافي حصري'],
        technical_specs=['رسومات 4K HDR', '120 إطار في الثانية', 'دعم Dolby Atmos'],
        tips=['أداء احترافي', 'تحديثات مجانية', 'إصدار مميز بمحتوى حصري'],
        category='game',
    ),
    Template(
        id='accessory',
        name='Gaming Accessory Template',
        summary='إكسسوار ألعاب عالي الجودة لتعزيز تجربة اللعب',
        overview='إكسسوار ألعاب عالي الجودة مصمم للراحة والأداء خلال جلسات اللعب الطويلة.',
        features=['تصميم مريح', 'بطارية تدوم طويلاً'],
        technical_specs=['اتصال لاسلكي', 'منفذ USB-C', 'بلوتوث'],
        tips=['جودة تصنيع عالية', 'ضمان سنة'],
        category='accessory',
    ),
    Template(
        id='console',
        name='Gaming Console Template',
        summary='جهاز ألعاب متطور بتقنيات حديثة',
        overview='جهاز ألعاب متطور يوفر أقوى تجربة لعب مع واجهة سهلة الاستخدام.',
        features=['معالج قوي', 'مساحة تخزين واسعة', 'لعب أونلاين'],
        technical_specs=['معالج مخصص', 'دعم 4K', 'واي فاي'],
        tips=['مكتبة ألعاب ضخمة', 'خدمات أونلاين متكاملة'],
        category='console',
    ),
    Template(
        id='mobile-game',
        name='Mobile Game Template',
        summary='لعبة جوال مبتكرة برسومات متقدمة',
        overview='لعبة جوال مبتكرة تجمع بين الرسومات المتقدمة والمنافسة عبر الإنترنت.',
        features=['تحكم باللمس', 'لعب جماعي', 'مزامنة عبر السحابة'],
        technical_specs=['رسومات HD', 'استهلاك منخفض للبطارية'],
        tips=['العب في أي مكان', 'تحديثات منتظمة'],
        category='game',
    ),
    Template(
        id='gaming-service',
        name='Gaming Service Template',
        summary='خدمة رقمية متكاملة لتجربة ألعاب فريدة',
        overview='خدمة رقمية متكاملة تمنحك مزايا حصرية ومحتوى يتجدد باستمرار.',
        features=['وصول فوري', 'ألعاب حصرية', 'عروض للأعضاء'],
        technical_specs=['تفعيل رقمي فوري', 'متعدد المنصات'],
        tips=['قيمة مستمرة طوال مدة الاشتراك'],
        category='digital',
    ),
]}

HOOKS = {
    'casual': '🎮 اكتشف {name}، تجربة ألعاب لا تُنسى!',
    'professional': '🎮 {name}، أداء احترافي وموثوقية عالية للاعبين المتقدمين',
    'collectors': '🏆 {name}، إضافة مميزة لمجموعتك',
}

PLATFORM_FEATURES = {
    'playstation': ['DualSense', 'رد فعل هزازي', 'دقة 4K', 'PlayStation Plus'],
    'xbox': ['Game Pass', 'Smart Delivery', 'سحابة الألعاب'],
    'nintendo': ['Joy-Con', 'Nintendo Switch Online', 'لعب محمول'],
    'pc': ['Steam', 'رسومات قابلة للتعديل', 'دعم لوحة المفاتيح والماوس على PC'],
    'mobile': ['شاشة لمس', 'لعب جماعي', 'مزامنة عبر السحابة'],
    'universal': ['متعدد المنصات', 'سهل الاستخدام'],
}

HYBRID_PLATFORM_LINES = {
    'playstation': '🎯 **ميزة PlayStation:** متوافق مع DualSense وPlayStation Plus',
    'xbox': '🎯 **ميزة Xbox:** متوافق مع Game Pass وخدمات Xbox',
    'nintendo': '🎯 **ميزة Nintendo:** مثالية للعب العائلي مع Joy-Con',
}

SEO_KEYWORDS = ['ألعاب', 'gaming', 'متجر ألعاب', 'الكويت']
PLATFORM_KEYWORDS = {
    'playstation': ['بلايستيشن', 'PlayStation'],
    'xbox': ['إكس بوكس', 'Xbox'],
    'nintendo': ['نينتندو', 'Nintendo'],
    'pc': ['كمبيوتر', 'PC'],
    'mobile': ['جوال', 'mobile'],
}


@dataclass
class FallbackConfig:
    enable_hybrid_mode: bool = False
    personalization: bool = True


@dataclass
class FallbackResult:
    template_id: str
    template_name: str
    description: str
    confidence: int
    source: str
    customization_level: int = 0
    sections: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ============================================================================
# TEMPLATE SELECTION
# ============================================================================

def _has_feature(context: FusedContext, *needles: str) -> bool:
    return any(n in f.lower() for f in context.key_features for n in needles)


def _game_score(context: FusedContext) -> int:
    score = 50
    if context.confidence > 0.8:
        score += 20
    if context.primary_context == 'visual':
        score += 15
    score += 10 * len(context.platforms)
    if context.target_audience == 'professional':
        score += 5
    elif context.target_audience == 'collectors':
        score += 8
    return min(100, score)


def _premium_game_score(context: FusedContext) -> int:
    score = 60
    if _has_feature(context, 'premium', 'elite'):
        score += 25
    if _has_feature(context, 'limited', 'collector') or context.target_audience == 'collectors':
        score += 20
    if context.primary_context == 'visual':
        score += 20
    return min(100, score)


def _accessory_score(context: FusedContext) -> int:
    score = 50
    if any(context.platform_specific.get(p) for p in ('playstation', 'xbox', 'nintendo', 'pc')):
        score += 30
    if _has_feature(context, 'wireless', 'bluetooth'):
        score += 15
    if _has_feature(context, 'professional', 'business'):
        score += 10
    return min(100, score)


def _console_score(context: FusedContext) -> int:
    score = 50
    score += 40 * sum(1 for p in ('playstation', 'xbox', 'nintendo') if context.platform_specific.get(p))
    if context.primary_context == 'visual':
        score += 20
    return min(100, score)


def _mobile_score(context: FusedContext) -> int:
    score = 50
    if _has_feature(context, 'touch', 'mobile'):
        score += 30
    if _has_feature(context, 'multiplayer', 'online'):
        score += 15
    if context.platform_specific.get('mobile'):
        score += 25
    return min(100, score)


def _service_score(context: FusedContext) -> int:
    score = 50
    if _has_feature(context, 'subscription', 'service'):
        score += 30
    if _has_feature(context, 'digital', 'online'):
        score += 20
    if context.target_audience == 'professional':
        score += 15
    return min(100, score)


def template_scores(context: FusedContext) -> Dict[str, int]:
    category = context.product_category
    scores: Dict[str, int] = {}

    if category in ('game', 'digital'):
        scores['basic-game'] = _game_score(context)
        scores['premium-game'] = _premium_game_score(context)
        if context.platform_specific.get('mobile'):
            scores['mobile-game'] = _mobile_score(context)
    if category == 'accessory':
        scores['accessory'] = _accessory_score(context)
    if category == 'console':
        scores['console'] = _console_score(context)
    if category == 'subscription' or (
        category == 'digital' and _has_feature(context, 'service', 'subscription')
    ):
        scores['gaming-service'] = _service_score(context)

    return scores


def select_template(context: FusedContext) -> Template:
    """Highest score wins; ties keep the earlier candidate"""
    best_id, best_score = DEFAULT_TEMPLATE, 0
    for template_id, score in template_scores(context).items():
        if score > best_score:
            best_id, best_score = template_id, score
    logger.debug(f"Selected template {best_id} (score {best_score})")
    return TEMPLATES[best_id]


# ============================================================================
# DESCRIPTION
# ============================================================================

def _primary_platform(context: FusedContext) -> str:
    return context.platforms[0] if context.platforms else 'universal'


def _bullets(items: List[str], icon: str) -> str:
    return "\n".join(f"• {icon} {item}" for item in items)


def build_sections(template: Template, context: FusedContext, name: str, name_en: str) -> List[str]:
    platform = _primary_platform(context)

    features: List[str] = []
    for feature in list(context.key_features) + PLATFORM_FEATURES[platform] + template.features:
        if feature not in features:
            features.append(feature)

    keywords = [name, name_en] + SEO_KEYWORDS
    for p in context.platforms:
        keywords += PLATFORM_KEYWORDS[p]

    return [
        HOOKS.get(context.target_audience, HOOKS['casual']).format(name=name),
        f"📦 **{OVERVIEW_LABEL}**\n{template.overview}",
        f"✨ **المميزات الرئيسية:**\n{_bullets(features, '⭐')}",
        f"🔍 **المواصفات الفنية:**\n{_bullets(template.technical_specs, '🔧')}",
        f"💡 **نصائح الخبراء:**\n{_bullets(template.tips, '✅')}",
        f"🎯 **وصف الـ SEO:**\n{name} ({name_en}) - {template.summary}\n\n"
        f"🔑 **الكلمات المفتاحية:** {', '.join(k for k in keywords if k)}",
    ]


# Whole words only; المميزات and مميزة stay untouched
COLLECTOR_WORDING = [
    (re.compile(r'(?<!\w)مميز(?!\w)'), 'مميز ونادر'),
    (re.compile(r'(?<!\w)قيمة(?!\w)'), 'قيمة استثمارية'),
]


def personalize(description: str, context: FusedContext) -> str:
    if context.target_audience == 'collectors':
        for pattern, replacement in COLLECTOR_WORDING:
            description = pattern.sub(replacement, description)
    return description


def enhance_hybrid(description: str, context: FusedContext) -> str:
    if context.primary_context == 'visual':
        description = description.replace(OVERVIEW_LABEL, HYBRID_OVERVIEW_LABEL)
    lines = [HYBRID_PLATFORM_LINES[p] for p in context.platforms if p in HYBRID_PLATFORM_LINES]
    if lines:
        description = description + "\n\n" + "\n".join(lines)
    return description


def fallback_confidence(template: Template, context: FusedContext, hybrid: bool) -> int:
    confidence = 50
    if template.id == 'premium-game' and context.product_category == 'game':
        confidence += 20
    if template.id == 'accessory' and context.product_category == 'accessory':
        confidence += 25
    if context.confidence > 0.7:
        confidence += 15
    if context.primary_context == 'balanced':
        confidence += 10
    if hybrid:
        confidence += 10
    return min(100, confidence)


def _customization_level(description: str, template: Template, context: FusedContext) -> int:
    level = 30
    if description.count('•') > 5:
        level += 15
    if context.key_features:
        level += 20
    if 'مميز ونادر' in description:
        level += 15
    if '🎯 **ميزة' in description:
        level += 10
    return min(100, level)


def generate_smart_fallback(
    context: FusedContext,
    name: str,
    name_en: str,
    config: Optional[FallbackConfig] = None
) -> FallbackResult:
    config = config or FallbackConfig()
    template = select_template(context)

    sections = build_sections(template, context, name, name_en)
    description = "\n\n".join(sections)

    if config.personalization:
        description = personalize(description, context)
    if config.enable_hybrid_mode:
        description = enhance_hybrid(description, context)

    return FallbackResult(
        template_id=template.id,
        template_name=template.name,
        description=description,
        confidence=fallback_confidence(template, context, config.enable_hybrid_mode),
        source='hybrid' if config.enable_hybrid_mode else 'template',
        customization_level=_customization_level(description, template, context),
        sections=sections,
    )


def available_templates() -> List[Dict[str, str]]:
    return [{'id': t.id, 'name': t.name, 'category': t.category} for t in TEMPLATES.values()]
