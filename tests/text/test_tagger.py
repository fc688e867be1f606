"""Tests for the spaCy-backed tagger."""

from storybook.text.tagger import SpacyTagger, Tagger, Token, TokenRole


def _roles(text: str) -> dict[str, TokenRole]:
    return {t.text: t.role for t in SpacyTagger().tag(text)}


class TestSpacyTagger:
    """Test token roles mapped from spaCy."""

    def test_satisfies_protocol(self):
        assert isinstance(SpacyTagger(), Tagger)

    def test_basic_roles(self):
        roles = _roles("Alice walked quickly into the old kitchen.")
        assert roles["Alice"] is TokenRole.PROPER_NOUN
        assert roles["walked"] is TokenRole.VERB
        assert roles["quickly"] is TokenRole.ADVERB
        assert roles["into"] is TokenRole.PREPOSITION
        assert roles["the"] is TokenRole.DETERMINER
        assert roles["old"] is TokenRole.ADJECTIVE
        assert roles["kitchen"] is TokenRole.NOUN
        assert roles["."] is TokenRole.PUNCTUATION

    def test_capitalized_sentence_starters_are_not_names(self):
        roles = _roles("She smiled. Then the door opened.")
        assert roles["She"] is TokenRole.PRONOUN
        assert roles["Then"] is not TokenRole.PROPER_NOUN

    def test_quotes_and_numbers(self):
        tokens = SpacyTagger().tag('"Wait," he said at 9:30.')
        assert tokens[0].role is TokenRole.QUOTE
        assert any(t.text == "9:30" and t.role is TokenRole.NUMBER for t in tokens)

    def test_possessive_stays_on_its_word(self):
        texts = [t.text for t in SpacyTagger().tag("Anna's coat was red.")]
        assert texts[0] == "Anna's"
        assert "'s" not in texts

    def test_sentence_starts(self):
        tokens = SpacyTagger().tag("Bob left. Alice stayed.")
        starts = [t.text for t in tokens if t.sentence_start]
        assert starts == ["Bob", "Alice"]

    def test_token_spans_skip_whitespace(self):
        text = "Bob  left.\n\nAlice stayed."
        tokens = SpacyTagger().tag(text)
        assert all(t.text.strip() == t.text and t.text for t in tokens)
        for token in tokens:
            assert text[token.start : token.end] == token.text

    def test_repr_names_model(self):
        assert repr(SpacyTagger("en_core_web_sm")) == "SpacyTagger(model='en_core_web_sm')"

    def test_custom_tagger_is_accepted(self):
        class Fixed:
            def tag(self, text: str) -> list[Token]:
                return [Token(text, 0, len(text), TokenRole.WORD, True)]

        assert isinstance(Fixed(), Tagger)
