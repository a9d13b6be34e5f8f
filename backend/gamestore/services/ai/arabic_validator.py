"""
Arabic Validator

Rule-based quality checks for generated Arabic product descriptions aimed at
Gulf customers: grammar and spelling, cultural appropriateness, gaming
terminology and readability, combined into a 0-100 score and a rating.

Score = 0.3 * grammar + 0.3 * cultural + 0.2 * terminology + 0.2 * readability
"""
import logging
import re
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)

# ============================================================================
# WORD LISTS
# ============================================================================

CORRECT_GAMING_TERMS = [
    'بلايستيشن', 'بلاي ستيشن', 'إكس بوكس', 'نينتندو', 'كمبيوتر',
    'ألعاب', 'جوال', 'تحكم', 'متحكم',
]

# Misspelling -> correct form
MISSPELLED_GAMING_TERMS = {
    'بلاستيشن': 'بلايستيشن',
    'بلي ستيشن': 'بلاي ستيشن',
    'اكس بوكس': 'إكس بوكس',
    'نينتيندو': 'نينتندو',
    'الالعاب': 'الألعاب',
    'اونلاين': 'أونلاين',
}

INAPPROPRIATE_EXPRESSIONS = ['يا ولد', 'يا أخي', 'حبيبي', 'حبيبتي']
RELIGIOUS_TERMS = ['حلال', 'حرام', 'إسلامي', 'ديني', 'صلاة', 'قرآن']
AGGRESSIVE_MARKETING = ['شراء الآن', 'اشتر الآن', 'فرصة أخيرة', 'سعر منخفض', 'عروض حصرية']
EXAGGERATED_SLANG = ['رهيبة', 'رهيب', 'خرافي', 'خرافية', 'فظيع', 'فظيعة']
INTENSIFIERS = ['جداً', 'جدا', 'كثير', 'مرة']

DANGLING_PREPOSITIONS = ['مع', 'في', 'على', 'من', 'إلى', 'الى', 'عن', 'حتى']

ARABIC_LETTER = re.compile(r'[ء-يٱ-ۓ]')
DIACRITIC = re.compile(r"[\u064B-\u065F\u0670]")
SENTENCE_SPLIT = re.compile(r'[.!?؟\n]+')

STRICTNESS_LEVELS = ['lenient', 'moderate', 'strict']
AUDIENCES = ['general', 'gulf', 'professional']
SEVERITIES = ['low', 'medium', 'high']

GRAMMAR_PENALTY = {'high': 10, 'medium': 5, 'low': 2}
CULTURAL_PENALTY = {'error': 15, 'warning': 5}

SHORT_TEXT_WORDS = 3
DETAILED_TEXT_WORDS = 10

# Average words per sentence
SHORT_SENTENCE_WORDS = 10
LONG_SENTENCE_WORDS = 25


# ============================================================================
# RESULT TYPES
# ============================================================================

@dataclass
class ValidationConfig:
    strictness: str = 'moderate'
    target_audience: str = 'gulf'
    enable_diacritics: bool = True
    min_readability_score: int = 70

    def __post_init__(self):
        if self.strictness not in STRICTNESS_LEVELS:
            raise ValueError(f"strictness must be one of: {', '.join(STRICTNESS_LEVELS)}")
        if self.target_audience not in AUDIENCES:
            raise ValueError(f"target_audience must be one of: {', '.join(AUDIENCES)}")


@dataclass
class GrammarIssue:
    type: str
    severity: str
    word: str
    position: int
    suggestion: str
    rule: str
    replacement: Optional[str] = None


@dataclass
class CulturalFlag:
    type: str
    severity: str
    term: str
    description: str
    suggestion: str


@dataclass
class ValidationResult:
    score: float
    grammar_issues: List[GrammarIssue] = field(default_factory=list)
    cultural_flags: List[CulturalFlag] = field(default_factory=list)
    terminology_accuracy: float = 0
    readability_score: float = 0
    recommendations: List[str] = field(default_factory=list)
    overall: str = 'poor'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ============================================================================
# HELPERS
# ============================================================================

def _term_pattern(term: str) -> re.Pattern:
    return re.compile(rf'(?<!\w){re.escape(term)}(?!\w)')


def _adjust_severity(base: str, strictness: str) -> str:
    index = SEVERITIES.index(base)
    if strictness == 'lenient':
        index = max(0, index - 1)
    elif strictness == 'strict':
        index = min(len(SEVERITIES) - 1, index + 1)
    return SEVERITIES[index]


def _sentences(text: str) -> List[str]:
    return [s.strip() for s in SENTENCE_SPLIT.split(text) if s.strip()]


def _words(text: str) -> List[str]:
    return re.findall(r'\S+', text)


def _strip_punctuation(word: str) -> str:
    return word.strip('.,!?؟،؛:;"\'()')


# ============================================================================
# CHECKS
# ============================================================================

def check_grammar(text: str, strictness: str = 'moderate') -> List[GrammarIssue]:
    issues: List[GrammarIssue] = []
    has_arabic = bool(ARABIC_LETTER.search(text))

    for sentence in _sentences(text):
        words = _words(sentence)
        last = _strip_punctuation(words[-1]) if words else ''
        if last in DANGLING_PREPOSITIONS:
            issues.append(GrammarIssue(
                type='grammar',
                severity=_adjust_severity('medium', strictness),
                word=last,
                position=text.rfind(last),
                suggestion='Complete the sentence after the preposition',
                rule='dangling preposition',
            ))

    words = [_strip_punctuation(w) for w in _words(text)]
    for index in range(1, len(words)):
        word = words[index]
        if word and word == words[index - 1] and word not in INTENSIFIERS:
            issues.append(GrammarIssue(
                type='grammar',
                severity=_adjust_severity('medium', strictness),
                word=word,
                position=index,
                suggestion=f'Remove the repeated word "{word}"',
                rule='repeated word',
                replacement=word,
            ))

    if has_arabic:
        for latin, arabic in (('?', '؟'), (',', '،'), ('!', '.')):
            position = text.find(latin)
            if position != -1:
                issues.append(GrammarIssue(
                    type='punctuation',
                    severity=_adjust_severity('low', strictness),
                    word=latin,
                    position=position,
                    suggestion=f'Replace "{latin}" with "{arabic}"',
                    rule='latin punctuation in arabic text',
                    replacement=arabic,
                ))

    position = text.find('  ')
    if position != -1:
        issues.append(GrammarIssue(
            type='syntax',
            severity=_adjust_severity('low', strictness),
            word='  ',
            position=position,
            suggestion='Remove extra spaces',
            rule='double space',
            replacement=' ',
        ))

    for wrong, right in MISSPELLED_GAMING_TERMS.items():
        match = _term_pattern(wrong).search(text)
        if match:
            issues.append(GrammarIssue(
                type='spelling',
                severity=_adjust_severity('medium', strictness),
                word=wrong,
                position=match.start(),
                suggestion=f'Replace "{wrong}" with "{right}"',
                rule='incorrect spelling of gaming term',
                replacement=right,
            ))

    return issues


def check_cultural(text: str, target_audience: str = 'gulf') -> List[CulturalFlag]:
    flags: List[CulturalFlag] = []

    for expression in INAPPROPRIATE_EXPRESSIONS:
        if expression in text:
            flags.append(CulturalFlag(
                type='social', severity='error', term=expression,
                description=f'Inappropriate form of address: {expression}',
                suggestion='Use more professional language',
            ))

    if target_audience in ('general', 'gulf'):
        for term in RELIGIOUS_TERMS:
            if _term_pattern(term).search(text):
                flags.append(CulturalFlag(
                    type='religious', severity='error', term=term,
                    description=f'Religious term in a gaming context: {term}',
                    suggestion='Focus on gaming aspects only',
                ))

        for term in AGGRESSIVE_MARKETING:
            if term in text:
                flags.append(CulturalFlag(
                    type='tone', severity='warning', term=term,
                    description=f'Aggressive marketing language: {term}',
                    suggestion='Use a more balanced marketing approach',
                ))

    for term in EXAGGERATED_SLANG:
        if _term_pattern(term).search(text):
            flags.append(CulturalFlag(
                type='language', severity='warning', term=term,
                description=f'Exaggerated slang: {term}',
                suggestion='Consider using more moderate language',
            ))

    for intensifier in INTENSIFIERS:
        if re.search(rf'(?<!\w){re.escape(intensifier)}\s+{re.escape(intensifier)}(?!\w)', text):
            flags.append(CulturalFlag(
                type='language', severity='warning', term=intensifier,
                description=f'Repeated intensifier: {intensifier}',
                suggestion='Consider using more moderate language',
            ))

    return flags


def terminology_accuracy(text: str) -> float:
    """Base 50, +10 per correct gaming term, -15 per misspelled one, clamped to 0-100"""
    score = 50
    score += 10 * sum(1 for term in CORRECT_GAMING_TERMS if term in text)
    score -= 15 * sum(1 for term in MISSPELLED_GAMING_TERMS if _term_pattern(term).search(text))
    return max(0, min(100, score))


def readability_score(text: str, enable_diacritics: bool = True) -> float:
    """
    Base 50, adjusted by:
      average sentence under 10 words +10, over 25 words -10
      one to three paragraphs +5
      diacritics present +5 (when enabled)
    """
    sentences = _sentences(text)
    if not sentences:
        return 0

    score = 50
    average = sum(len(_words(s)) for s in sentences) / len(sentences)
    if average < SHORT_SENTENCE_WORDS:
        score += 10
    elif average > LONG_SENTENCE_WORDS:
        score -= 10

    paragraphs = [p for p in re.split(r'\n\s*\n', text) if p.strip()]
    if 1 <= len(paragraphs) <= 3:
        score += 5

    if enable_diacritics and DIACRITIC.search(text):
        score += 5

    return max(0, min(100, score))


def overall_rating(score: float, readability: float, min_readability: int) -> str:
    if score >= 90 and readability >= min_readability:
        return 'excellent'
    if score >= 75 and readability >= min_readability - 10:
        return 'good'
    if score >= 60 and readability >= min_readability - 20:
        return 'acceptable'
    return 'poor'


def _recommendations(result: ValidationResult, word_count: int) -> List[str]:
    recommendations = []

    if word_count < DETAILED_TEXT_WORDS:
        recommendations.append('Consider adding more details about the product')

    if result.grammar_issues:
        recommendations.append('Review grammar and spelling for accuracy')
        if any(i.severity == 'high' for i in result.grammar_issues):
            recommendations.append('Fix high-severity grammar issues first')

    if result.cultural_flags:
        if any(f.severity == 'error' for f in result.cultural_flags):
            recommendations.append('Remove culturally inappropriate content')
        if any(f.type == 'language' for f in result.cultural_flags):
            recommendations.append('Consider using more moderate language')
        if any(f.type == 'tone' for f in result.cultural_flags):
            recommendations.append('Use a more balanced marketing approach')

    if result.terminology_accuracy < 70:
        recommendations.append('Use correct gaming terminology for the Gulf region')

    if result.readability_score < 60:
        recommendations.append('Improve text structure and readability')

    for issue in result.grammar_issues:
        if issue.suggestion not in recommendations:
            recommendations.append(issue.suggestion)

    return recommendations


# ============================================================================
# PUBLIC API
# ============================================================================

def validate_arabic_text(text: str, config: Optional[ValidationConfig] = None) -> ValidationResult:
    config = config or ValidationConfig()
    text = text or ''
    word_count = len(_words(text))

    grammar_issues = check_grammar(text, config.strictness)
    cultural_flags = check_cultural(text, config.target_audience)
    terminology = terminology_accuracy(text)
    readability = readability_score(text, config.enable_diacritics)

    grammar = max(0, 100 - sum(GRAMMAR_PENALTY[i.severity] for i in grammar_issues))
    cultural = max(0, 100 - sum(CULTURAL_PENALTY[f.severity] for f in cultural_flags))
    score = 0.3 * grammar + 0.3 * cultural + 0.2 * terminology + 0.2 * readability

    if word_count < SHORT_TEXT_WORDS:
        score = min(score, 49)
    score = round(max(0, min(100, score)), 1)

    result = ValidationResult(
        score=score,
        grammar_issues=grammar_issues,
        cultural_flags=cultural_flags,
        terminology_accuracy=terminology,
        readability_score=readability,
        overall=overall_rating(score, readability, config.min_readability_score),
    )
    result.recommendations = _recommendations(result, word_count)

    logger.debug(f"Arabic validation: score={result.score} overall={result.overall}")
    return result


def quick_validation(text: str) -> Dict[str, Any]:
    """Cheap checks without scoring"""
    issues = []
    if not ARABIC_LETTER.search(text or ''):
        issues.append('Text contains no Arabic characters')
    if '?' in (text or '') or '!' in (text or ''):
        issues.append('Contains non-Arabic punctuation marks')
    if len((text or '').strip()) < 20:
        issues.append('Text too short for meaningful description')
    return {'has_basic_issues': bool(issues), 'issues': issues}


def improve_text(text: str, validation: ValidationResult) -> str:
    """Apply the mechanical fixes a validation found"""
    improved = text

    for issue in validation.grammar_issues:
        if issue.rule == 'repeated word':
            word = re.escape(issue.word)
            improved = re.sub(rf'(?<!\w)({word})(\s+\1)+(?!\w)', r'\1', improved)
        elif issue.rule == 'double space':
            improved = re.sub(r' {2,}', ' ', improved)
        elif issue.rule == 'dangling preposition':
            improved = re.sub(rf'\s+{re.escape(issue.word)}\s*$', '', improved)
        elif issue.replacement is not None:
            if issue.type == 'spelling':
                improved = _term_pattern(issue.word).sub(issue.replacement, improved)
            else:
                improved = improved.replace(issue.word, issue.replacement)

    for flag in validation.cultural_flags:
        if flag.type == 'language' and flag.term in INTENSIFIERS:
            term = re.escape(flag.term)
            improved = re.sub(rf'(?<!\w){term}(\s+{term})+(?!\w)', flag.term, improved)
        elif flag.type == 'tone':
            improved = improved.replace(flag.term, 'احصل عليه')
        elif flag.severity == 'error':
            improved = improved.replace(flag.term, '')

    return re.sub(r' {2,}', ' ', improved).strip()


def is_appropriate_for_audience(text: str, audience: str = 'gulf') -> bool:
    validation = validate_arabic_text(text, ValidationConfig(target_audience=audience))
    return validation.overall != 'poor' and not any(
        f.severity == 'error' for f in validation.cultural_flags
    )
