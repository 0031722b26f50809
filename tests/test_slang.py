from slanglid.config.settings import LANGUAGES
from slanglid.features.slang import SlangMatcher, default_matcher, load_slang_dictionaries


def _matcher():
    return SlangMatcher(
        {
            "es": {"hola", "wey", "que onda"},
            "en": {"hello", "lol"},
            "it": {"lol"},
        }
    )


def test_single_word_scores_token_and_whole_text():
    match = _matcher().match("hola")
    assert match.language == "es"
    # token (+1), whole text as typed (+2) and normalized (+2)
    assert match.scores == {"es": 5, "en": 0, "it": 0}
    assert match.confidence == 1.0


def test_multi_word_phrase_entry():
    match = _matcher().match("Que Onda")
    assert match.language == "es"
    assert match.scores["es"] == 4


def test_confidence_is_share_of_total():
    match = _matcher().match("hola wey hello")
    assert match.language == "es"
    assert match.scores == {"es": 2, "en": 1, "it": 0}
    assert match.confidence == 2 / 3


def test_ties_follow_language_order():
    match = _matcher().match("lol")
    assert match.language == "en"
    assert match.confidence == 0.5


def test_normalized_form_matches_after_emoji_removal():
    match = _matcher().match("hello \U0001F600")
    assert match.language == "en"
    assert match.scores["en"] == 3


def test_no_signal_returns_none():
    assert _matcher().match("nothing to see here") is None
    assert _matcher().match("") is None


def test_bundled_dictionaries():
    dictionaries = load_slang_dictionaries()
    assert list(dictionaries) == LANGUAGES
    assert all(dictionaries[code] for code in dictionaries)
    assert "hola" in dictionaries["es"]
    assert "lol" in dictionaries["en"]
    assert "mdr" in dictionaries["fr"]
    assert "cmq" in dictionaries["it"]
    assert "vlw" in dictionaries["pt"]


def test_bundled_terms_owned_by_single_language():
    dictionaries = load_slang_dictionaries()
    owners = {term: [code for code in dictionaries if term in dictionaries[code]]
              for term in ("ciao", "ur", "sheesh", "mega", "ne")}
    assert owners == {
        "ciao": ["it"],
        "ur": ["en"],
        "sheesh": ["en"],
        "mega": ["it"],
        "ne": ["pt"],
    }


def test_missing_dictionary_is_skipped(tmp_path):
    assert load_slang_dictionaries(tmp_path, ["xx"]) == {}


def test_default_matcher_is_shared():
    assert default_matcher() is default_matcher()
    assert default_matcher().match("mdr ptdr").language == "fr"
