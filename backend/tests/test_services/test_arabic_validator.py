"""
Tests for the Arabic description validator
"""
import pytest

from gamestore.services.ai.arabic_validator import (
    ValidationConfig, validate_arabic_text, check_grammar, check_cultural,
    terminology_accuracy, readability_score, quick_validation, improve_text,
    is_appropriate_for_audience,
)

GOOD_TEXT = (
    "استمتع بأفضل ألعاب المغامرة على بلايستيشن و إكس بوكس. "
    "رسومات واضحة وقصة مشوقة دائماً. تناسب جميع أفراد العائلة."
)


class TestGrammar:

    def test_misspelled_gaming_term(self):
        issues = check_grammar("أفضل ألعاب بلاستيشن في الكويت")

        spelling = [i for i in issues if i.type == 'spelling']
        assert len(spelling) == 1
        assert spelling[0].replacement == 'بلايستيشن'
        assert spelling[0].severity == 'medium'

    def test_dangling_preposition(self):
        issues = check_grammar("لعبة ممتعة مع")

        assert [i.rule for i in issues] == ['dangling preposition']

    def test_repeated_word(self):
        issues = check_grammar("لعبة لعبة ممتعة للجميع")

        assert issues[0].rule == 'repeated word'
        assert issues[0].word == 'لعبة'

    def test_repeated_intensifier_is_not_grammar(self):
        assert check_grammar("لعبة ممتعة جداً جداً للجميع") == []

    def test_latin_question_mark_in_arabic(self):
        issues = check_grammar("هل تبحث عن لعبة جديدة?")

        assert issues[0].type == 'punctuation'
        assert issues[0].replacement == '؟'

    def test_strictness_shifts_severity(self):
        strict = check_grammar("لعبة ممتعة مع", strictness='strict')
        lenient = check_grammar("لعبة ممتعة مع", strictness='lenient')

        assert strict[0].severity == 'high'
        assert lenient[0].severity == 'low'


class TestCultural:

    def test_inappropriate_address(self):
        flags = check_cultural("حبيبي هذه اللعبة لك")

        assert flags[0].type == 'social'
        assert flags[0].severity == 'error'

    def test_religious_terms_only_for_general_audiences(self):
        text = "منتج حلال للعائلة"

        assert [f.type for f in check_cultural(text, 'gulf')] == ['religious']
        assert check_cultural(text, 'professional') == []

    def test_aggressive_marketing(self):
        flags = check_cultural("اشتر الآن قبل نفاد الكمية")

        assert flags[0].type == 'tone'
        assert flags[0].severity == 'warning'


class TestScores:

    def test_terminology_accuracy(self):
        assert terminology_accuracy("بلايستيشن و إكس بوكس") == 70
        assert terminology_accuracy("بلاستيشن") == 35
        assert terminology_accuracy("") == 50

    def test_readability_of_empty_text(self):
        assert readability_score("") == 0

    def test_readability_of_good_text(self):
        # 50 base + 10 short sentences + 5 single paragraph + 5 diacritics
        assert readability_score(GOOD_TEXT) == 70

    def test_short_sentences_read_better_than_long_ones(self):
        short = "لعبة حماسية للعائلة. رسومات واضحة وجميلة. تحكم سهل وسريع."
        medium = " ".join(["رسومات رائعة"] * 6 + ["دائما."] + ["قصة مشوقة"] * 6 + ["للجميع."])
        long_sentence = " ".join(["قصة مشوقة"] * 14) + "."

        assert readability_score(short) == 65
        assert readability_score(medium) == 55
        assert readability_score(long_sentence) == 45
        assert readability_score(short) > readability_score(long_sentence)

    def test_diacritics_bonus_can_be_disabled(self):
        assert readability_score(GOOD_TEXT, enable_diacritics=False) == 65

    def test_many_paragraphs_lose_structure_bonus(self):
        text = "\n\n".join(["لعبة ممتعة للجميع."] * 4)

        assert readability_score(text) == 60

    def test_good_text_is_excellent(self):
        # Act
        result = validate_arabic_text(GOOD_TEXT)

        # Assert
        assert result.grammar_issues == []
        assert result.cultural_flags == []
        assert result.score == 90.0
        assert result.overall == 'excellent'

    def test_short_text_is_capped(self):
        result = validate_arabic_text("لعبة رائعة")

        assert result.score <= 49
        assert result.overall == 'poor'
        assert 'Consider adding more details about the product' in result.recommendations

    def test_invalid_config(self):
        with pytest.raises(ValueError, match="strictness"):
            ValidationConfig(strictness='extreme')
        with pytest.raises(ValueError, match="target_audience"):
            ValidationConfig(target_audience='kids')


class TestHelpers:

    def test_quick_validation(self):
        result = quick_validation("Hello!")

        assert result['has_basic_issues'] is True
        assert len(result['issues']) == 3

    def test_improve_text_applies_fixes(self):
        # Arrange
        text = "لعبة لعبة على بلاستيشن  اشتر الآن"
        validation = validate_arabic_text(text)

        # Act
        improved = improve_text(text, validation)

        # Assert
        assert improved == "لعبة على بلايستيشن احصل عليه"

    def test_is_appropriate_for_audience(self):
        assert is_appropriate_for_audience(GOOD_TEXT) is True
        assert is_appropriate_for_audience("حبيبي " + GOOD_TEXT) is False
