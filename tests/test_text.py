"""
Tests for the content normalizer (clean_text / make_excerpt).
"""
import pytest

from app.core.text import MAX_EXCERPT_LENGTH, clean_text, make_excerpt

LONG_SENTENCES = (
    "The latest season brings a brand new map to the game. "
    "Players can explore ruined castles and sunken cities. "
    "Weapons have been rebalanced across the board to favour close combat. "
    "Matchmaking now considers party size more carefully than before. "
    "We also fixed a crash that happened when alt-tabbing during loading screens. "
    "Thank you for playing and see you in the next update."
)


class TestCleanText:
    """Markup, entities and Steam formatting are removed."""

    def test_strips_html_tags_without_gluing_words(self):
        assert clean_text("<p>Hello</p><p>world</p>") == "Hello world"

    def test_removes_images_entirely(self):
        raw = 'Before <img src="https://cdn.test/a.png" /> after'
        assert clean_text(raw) == "Before after"

    def test_decodes_named_entities(self):
        raw = "Tom &amp; Jerry&nbsp;say &quot;hi&quot; &lt;3 it&apos;s"
        assert clean_text(raw) == "Tom & Jerry say \"hi\" <3 it's"

    def test_removes_bbcode_and_placeholders(self):
        raw = "[b]Patch[/b] notes [url=https://store.test]here[/url] {STEAM_CLAN_IMAGE}"
        assert clean_text(raw) == "Patch notes here"

    def test_removes_image_blocks_and_video_embeds(self):
        raw = (
            "Intro [img]{STEAM_CLAN_IMAGE}/123/banner.png[/img] text "
            "[previewyoutube=abc;full][/previewyoutube] end"
        )
        assert clean_text(raw) == "Intro text end"

    def test_removes_bare_image_urls(self):
        raw = "See https://cdn.test/screens/shot.JPG?size=large for details"
        assert clean_text(raw) == "See for details"

    def test_keeps_non_image_urls(self):
        raw = "Read more at https://example.test/news/1"
        assert clean_text(raw) == raw

    def test_collapses_whitespace(self):
        assert clean_text("a\n\n  b\t\tc ") == "a b c"

    def test_empty_input(self):
        assert clean_text("") == ""


class TestMakeExcerpt:
    """Length rules: <20 chars -> "", >300 chars -> bounded."""

    def test_image_only_input_is_empty(self):
        assert make_excerpt("<img src='x'>") == ""

    def test_short_text_is_empty(self):
        assert make_excerpt("<b>Too short</b>") == ""

    def test_medium_text_is_unchanged(self):
        text = "A perfectly reasonable news excerpt."
        assert make_excerpt(text) == text

    def test_long_text_ends_at_sentence_after_200(self):
        excerpt = make_excerpt(LONG_SENTENCES)
        assert len(excerpt) <= MAX_EXCERPT_LENGTH
        assert excerpt.endswith(".")
        assert excerpt.rfind(".") > 200

    def test_long_text_without_periods_ends_at_word(self):
        text = " ".join(["word"] * 100)
        excerpt = make_excerpt(text)
        assert excerpt.endswith("...")
        assert not excerpt[:-3].endswith(" ")
        assert len(excerpt) <= MAX_EXCERPT_LENGTH + 3

    def test_long_text_without_boundaries_is_hard_cut(self):
        text = "x" * 500
        assert make_excerpt(text) == "x" * 300 + "..."

    @pytest.mark.parametrize(
        "raw",
        [
            LONG_SENTENCES,
            " ".join(["word"] * 100),
            "y" * 400,
            "Short but long enough to keep.",
            "<p>" + "Markup heavy text &amp; more " * 30 + "</p>",
        ],
    )
    def test_idempotent_and_bounded(self, raw):
        once = make_excerpt(raw)
        assert make_excerpt(once) == once
        assert len(once) <= 303
