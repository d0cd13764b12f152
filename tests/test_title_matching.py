"""Tests for exact and fuzzy song title matching."""

from __future__ import annotations

from title_matching import contains_japanese, is_standalone, match_title, order_titles, split_lines


class TestOrdering:
    def test_japanese_first_then_longest(self):
        titles = ["Song B", "曲A (Japanese)", "A much longer title"]

        assert order_titles(titles) == ["曲A (Japanese)", "A much longer title", "Song B"]

    def test_caller_list_is_not_mutated(self):
        titles = ["Song B", "曲A (Japanese)", "A much longer title"]
        snapshot = list(titles)

        order_titles(titles)
        match_title("Song B", titles)

        assert titles == snapshot

    def test_contains_japanese(self):
        assert contains_japanese("こんにちは")
        assert contains_japanese("カタカナ")
        assert contains_japanese("漢字")
        assert not contains_japanese("PARANOiA")
        assert not contains_japanese("")

    def test_split_lines_trims_and_drops_blanks(self):
        assert split_lines("  A  \n\n B\n   \n") == ["A", "B"]


class TestExactMatch:
    def test_standalone_line(self):
        match = match_title("DANCE AROUND\n990720", ["DANCE AROUND"])

        assert match is not None
        assert match.title == "DANCE AROUND"
        assert match.kind == "standalone"

    def test_case_insensitive_for_long_titles(self):
        match = match_title("dance around\n990720", ["DANCE AROUND"])

        assert match is not None
        assert match.kind == "standalone"

    def test_trailing_noise_still_standalone(self):
        assert is_standalone("DANCE AROUND", ["DANCE AROUND 7"])
        assert not is_standalone("DANCE AROUND", ["DANCE AROUND 7 8 9"])

    def test_embedded_in_long_line(self):
        match = match_title("NOW PLAYING DANCE AROUND AT THE ARCADE TODAY\n123", ["DANCE AROUND"])

        assert match is not None
        assert match.kind == "embedded"

    def test_title_must_be_word_bounded(self):
        assert match_title("DANCEAROUND", ["AROUND"]) is None

    def test_short_titles_are_case_sensitive(self):
        assert match_title("max\n123", ["MAX"]) is None
        match = match_title("MAX\n123", ["MAX"])
        assert match is not None
        assert match.kind == "standalone"

    def test_standalone_beats_longer_embedded(self):
        text = "PARANOiA Revolution remix medley by someone\nPARANOiA"

        match = match_title(text, ["PARANOiA Revolution", "PARANOiA"])

        assert match is not None
        assert match.title == "PARANOiA"
        assert match.kind == "standalone"

    def test_first_embedded_is_kept(self):
        text = "xx LONGER TITLE HERE yy zz qq ww\nabc SHORT ONE def ghi jkl mno"

        match = match_title(text, ["SHORT ONE", "LONGER TITLE HERE"])

        assert match is not None
        assert match.title == "LONGER TITLE HERE"
        assert match.kind == "embedded"

    def test_japanese_priority_does_not_force_a_match(self):
        match = match_title("RESULT\nSong B\n990720", ["曲A (Japanese)", "Song B"])

        assert match is not None
        assert match.title == "Song B"

    def test_regex_characters_in_title(self):
        match = match_title("Healing-D-Vision\n(R3) [rmx]?\n", ["(R3) [rmx]?"])

        assert match is not None
        assert match.title == "(R3) [rmx]?"


class TestFuzzyMatch:
    def test_single_misread_character(self):
        match = match_title("DANCE ARQUND\n990720", ["DANCE AROUND"])

        assert match is not None
        assert match.title == "DANCE AROUND"
        assert match.kind == "fuzzy"
        assert match.distance == 1

    def test_latin_threshold(self):
        assert match_title("DXNCX ARXUXD", ["DANCE AROUND"]) is None

    def test_japanese_threshold_is_wider(self):
        match = match_title("まほラのことぱをおレえで", ["まほうのことばをおしえて"])

        assert match is not None
        assert match.kind == "fuzzy"
        assert match.distance == 4

    def test_short_titles_are_never_fuzzy(self):
        assert match_title("MAY", ["MAX"]) is None

    def test_global_minimum_distance_wins(self):
        match = match_title("DANCE ARQUND", ["DANCE AROUNDS", "DANCE AROUND"])

        assert match is not None
        assert match.title == "DANCE AROUND"
        assert match.distance == 1

    def test_ties_keep_first_in_search_order(self):
        match = match_title("ABCDX", ["ABCDE", "ABCDF"])

        assert match is not None
        assert match.title == "ABCDE"

    def test_embedded_exact_outranks_fuzzy(self):
        text = "we will DANCE AROUND the arcade later today ok\nTRIP MACHIN3"

        match = match_title(text, ["DANCE AROUND", "TRIP MACHINE"])

        assert match is not None
        assert match.title == "DANCE AROUND"
        assert match.kind == "embedded"


class TestNoInput:
    def test_empty_catalogue(self):
        assert match_title("DANCE AROUND", []) is None

    def test_empty_text(self):
        assert match_title("", ["DANCE AROUND"]) is None

    def test_deterministic(self):
        titles = ["DANCE AROUND", "DANCE AROUNDS", "曲A"]
        text = "DANCE ARQUND\n990720"

        assert match_title(text, titles) == match_title(text, titles)


class TestScriptRanges:
    def test_range_bounds(self):
        assert contains_japanese("ぁ")
        assert contains_japanese("ヿ")
        assert contains_japanese("一")
        assert contains_japanese("龯")
        assert not contains_japanese("龰")
        assert not contains_japanese("〿")

    def test_catalogue_string_is_returned_for_case_folded_text(self):
        match = match_title("ſong B\n990720", ["Song B"])

        assert match is not None
        assert match.title == "Song B"
