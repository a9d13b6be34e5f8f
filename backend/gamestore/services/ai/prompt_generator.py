"""
Builds the LLM prompt for an Arabic (or English) product description from a
fused context. Sections are appended in a fixed order: base, cultural
guidelines, gaming terminology, marketing, technical specs, complexity.
"""
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any

from gamestore.services.ai.context_fusion import FusedContext

LANGUAGES = ['ar', 'en']
CULTURAL_LEVELS = ['conservative', 'moderate', 'liberal']
AUDIENCES = ['casual', 'professional', 'collectors']
COMPLEXITIES = ['simple', 'standard', 'detailed']

ARABIC_PLATFORM_NAMES = {
    'playstation': 'بلايستيشن',
    'xbox': 'إكس بوكس',
    'nintendo': 'نينتندو',
    'pc': 'كمبيوتر',
    'mobile': 'جوال',
}

GULF_GAMING_TERMS = {
    'playstation': 'بلايستيشن',
    'xbox': 'إكس بوكس',
    'nintendo': 'نينتندو',
    'pc': 'كمبيوتر',
    'mobile': 'جوال',
    'controller': 'يد تحكم',
    'headset': 'سماعة رأس',
    'digital': 'رقمي',
    'physical': 'نسخة فعلية',
    'exclusive': 'حصري',
    'limited': 'محدود',
    'edition': 'نسخة',
}

PLATFORM_TERMINOLOGY = {
    'playstation': {
        'features': ['DualSense', 'PS5', 'PS Plus', 'حصري'],
        'technical': ['دقة 4K', 'رسومات متقدمة', 'رد فعل هزازي'],
    },
    'xbox': {
        'features': ['Game Pass', 'Xbox Series X', 'Smart Delivery'],
        'technical': ['أداء قوي', 'سحابة الألعاب', 'التكامل مع ويندوز'],
    },
    'nintendo': {
        'features': ['Switch', 'Joy-Con', 'Nintendo Switch Online'],
        'technical': ['محمول بالكامل', 'تعدد لاعبين'],
    },
    'pc': {
        'features': ['Steam', 'Epic Games', 'RTX'],
        'technical': ['60 إطار في الثانية', 'دعم لوحة المفاتيح', 'رسومات قابلة للتعديل'],
    },
    'mobile': {
        'features': ['iOS', 'Android', 'ألعاب الجوال'],
        'technical': ['تحكم باللمس', 'رسومات ثلاثية الأبعاد'],
    },
}

CULTURAL_GUIDELINES = {
    'conservative': {
        'tone': 'Use formal language (رسمي ومحافظ)',
        'expressions': ['ممتاز', 'عالي الجودة', 'موثوق'],
        'avoid': ['slang', 'sarcasm', 'exaggeration'],
    },
    'moderate': {
        'tone': 'Friendly and contemporary (ودود وعصري)',
        'expressions': ['رائع', 'ممتع', 'مبتكر'],
        'avoid': ['overly stiff wording'],
    },
    'liberal': {
        'tone': 'Use modern expressions that appeal to young gamers (عصري وجذاب)',
        'expressions': ['مذهل', 'لا يُقاوم', 'ثوري'],
        'avoid': ['overly formal wording'],
    },
}

AUDIENCE_GUIDELINES = {
    'casual': {'language': 'simple, easy to follow', 'focus': ['fun', 'ease of use', 'excitement']},
    'professional': {'language': 'professional and precise', 'focus': ['performance', 'quality', 'reliability']},
    'collectors': {'language': 'values rarity and worth', 'focus': ['rarity', 'value', 'limited edition']},
}

COMPLEXITY_RULES = {
    'simple': {'words': '150-200', 'detail': 'short, direct sentences'},
    'standard': {'words': '250-350', 'detail': 'balanced description with enough detail'},
    'detailed': {'words': '400-500', 'detail': 'comprehensive description with examples and precise details'},
}

URGENCY_PHRASE = 'فرصة محدودة'
VALUE_PHRASE = 'قيمة استثنائية'
CALLS_TO_ACTION = ['احصل عليه الآن', 'استمتع بـ', 'انطلق في مغامرات جديدة']


@dataclass
class PromptConfig:
    language: str = 'ar'
    cultural_level: str = 'moderate'
    target_audience: str = 'casual'
    complexity: str = 'standard'
    include_marketing: bool = True
    include_technical_specs: bool = True

    def __post_init__(self):
        for name, value, allowed in (
            ('language', self.language, LANGUAGES),
            ('cultural_level', self.cultural_level, CULTURAL_LEVELS),
            ('target_audience', self.target_audience, AUDIENCES),
            ('complexity', self.complexity, COMPLEXITIES),
        ):
            if value not in allowed:
                raise ValueError(f"{name} must be one of: {', '.join(allowed)}")


@dataclass
class PromptMetadata:
    word_count: int
    cultural_adaptations: List[str] = field(default_factory=list)
    gaming_terminology: List[str] = field(default_factory=list)
    structure_type: str = 'standard'


@dataclass
class GeneratedPrompt:
    prompt: str
    metadata: PromptMetadata

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _base_section(
    context: FusedContext,
    name: str,
    name_en: str,
    description_en: Optional[str],
    language: str
) -> str:
    output_language = 'Arabic' if language == 'ar' else 'English'
    lines = [
        "You are a professional gaming and marketing expert for the Gulf market.",
        f"Task: write an engaging product description in {output_language} based on the data below, "
        "especially the English name and description. Do not invent features.",
        "",
        "Context:",
        f"- Product name (Arabic): {name}",
        f"- Product name (English): {name_en}",
    ]
    if description_en:
        lines.append(f"- Original description (English): {description_en}")
    lines += [
        f"- Category: {context.product_category}",
        f"- Target audience: {context.target_audience}",
        f"- Primary context: {context.primary_context}",
        f"- Analysis confidence: {context.confidence * 100:.0f}%",
    ]
    if context.conflict_resolution:
        lines.append(f"- Note: {context.conflict_resolution.explanation}")

    if context.key_features:
        lines += ["", "Key features:"]
        lines += [f"{i}. {feature}" for i, feature in enumerate(context.key_features, start=1)]

    if context.platforms:
        lines += ["", "Platforms:"]
        lines += [f"- {ARABIC_PLATFORM_NAMES[p]} ({p}): compatible" for p in context.platforms]

    lines += [
        "",
        "Response format (no extra introduction):",
        "🔥 [one strong opening line]",
        "📦 **تفاصيل المنتج:** bullet points for type, platforms and region/edition",
        "✨ **لماذا ستحب هذا المنتج؟** four bullet points, each starting with an emoji",
        "💡 **معلومات إضافية:** two bullet points",
        "🔑 **كلمات مفتاحية:** five comma separated keywords",
    ]
    return "\n".join(lines)


def _cultural_section(cultural_level: str, audience: str) -> str:
    cultural = CULTURAL_GUIDELINES[cultural_level]
    guide = AUDIENCE_GUIDELINES[audience]
    return "\n".join([
        "Cultural guidelines (Gulf Arabic):",
        f"- Tone: {cultural['tone']}",
        f"- Preferred expressions: {', '.join(cultural['expressions'])}",
        f"- Avoid: {', '.join(cultural['avoid'])}",
        f"- Audience language: {guide['language']}",
        f"- Focus on: {', '.join(guide['focus'])}",
        "- Respect local customs and avoid culturally sensitive content",
    ])


def _terminology_section(context: FusedContext) -> str:
    lines = []
    for platform in context.platforms:
        terms = PLATFORM_TERMINOLOGY[platform]
        lines += [
            f"{ARABIC_PLATFORM_NAMES[platform]} terminology:",
            f"- Features: {', '.join(terms['features'])}",
            f"- Technical: {', '.join(terms['technical'])}",
        ]
    lines.append("General Gulf Arabic gaming terminology:")
    lines += [f"- {en}: {ar}" for en, ar in GULF_GAMING_TERMS.items()]
    return "\n".join(lines)


def _marketing_section(context: FusedContext) -> str:
    elements = []
    if context.target_audience == 'collectors' or any(
        'limited' in f.lower() or 'محدود' in f for f in context.key_features
    ):
        elements.append(URGENCY_PHRASE)
    elements.append(VALUE_PHRASE)
    return "\n".join(
        ["Marketing elements:"]
        + [f"- {e}" for e in elements]
        + [f"- Suggested calls to action: {', '.join(CALLS_TO_ACTION)}"]
    )


def _technical_section(context: FusedContext) -> Optional[str]:
    specs = []
    for platform in context.platforms:
        specs += PLATFORM_TERMINOLOGY[platform]['technical']
    if not specs:
        return None
    return "\n".join(["Technical specifications to cover:"] + [f"- {s}" for s in specs])


def _complexity_section(complexity: str) -> str:
    rule = COMPLEXITY_RULES[complexity]
    return "\n".join([
        "Length and detail:",
        f"- Target length: {rule['words']} words",
        f"- Detail level: {rule['detail']}",
    ])


def generate_prompt(
    context: FusedContext,
    name: str,
    name_en: str,
    description_en: Optional[str] = None,
    config: Optional[PromptConfig] = None
) -> GeneratedPrompt:
    config = config or PromptConfig()

    sections = [
        _base_section(context, name, name_en, description_en, config.language),
        _cultural_section(config.cultural_level, config.target_audience),
        _terminology_section(context),
    ]
    if config.include_marketing:
        sections.append(_marketing_section(context))
    if config.include_technical_specs:
        technical = _technical_section(context)
        if technical:
            sections.append(technical)
    sections.append(_complexity_section(config.complexity))

    prompt = "\n\n".join(sections)

    adaptations = ['Gulf Arabic dialect', f"{config.cultural_level} tone", f"{config.target_audience} audience"]
    terminology = [f"{en}: {ar}" for en, ar in GULF_GAMING_TERMS.items() if ar in prompt]

    return GeneratedPrompt(
        prompt=prompt,
        metadata=PromptMetadata(
            # Rough estimate, about six characters per Arabic word
            word_count=len(prompt) // 6,
            cultural_adaptations=adaptations,
            gaming_terminology=terminology,
            structure_type=config.complexity,
        ),
    )
