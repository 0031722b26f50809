from slanglid.features.normalizer import augment_text, normalize_text


def test_normalize_lowercases_and_collapses_whitespace():
    assert normalize_text("Hello    World") == "hello world"
    assert normalize_text("  hello world  ") == "hello world"


def test_normalize_strips_urls_emails_and_phone_numbers():
    assert normalize_text("Check this https://example.com out") == "check this out"
    assert normalize_text("Contact me at test@example.com please") == "contact me at please"
    assert normalize_text("Call me at +1-555-123-4567") == "call me at"


def test_normalize_strips_emoji():
    assert normalize_text("hola amigo \U0001F600\U0001F44D") == "hola amigo"
    assert normalize_text("☀\U0001F680") == ""


def test_normalize_non_text_input():
    assert normalize_text("") == ""
    assert normalize_text(None) == ""
    assert normalize_text(123) == ""
    assert normalize_text({}) == ""


def test_augment_keeps_original_first():
    variations = augment_text("hello world", "en")
    assert variations[0] == "hello world"


def test_augment_adds_normalized_and_punctuation_free_variants():
    assert "hello world" in augment_text("Hello World", "en")
    assert "hello world" in augment_text("hello, world!", "en")


def test_punctuation_free_variant_keeps_accented_letters():
    assert "también sí" in augment_text("¡también, sí!", "es")


def test_augment_language_abbreviations():
    assert "xq no vienes" in augment_text("porque no vienes", "es")
    assert "see u b4 tmrw" in augment_text("see you before tomorrow", "en")
    assert "slt bjr" in augment_text("salut bonjour", "fr")
    assert "cmq grz" in augment_text("comunque grazie", "it")
    assert "vc tb" in augment_text("voce tambem", "pt")
    assert "vllt thx" in augment_text("vielleicht danke", "de")


def test_augment_unknown_language_and_empty_text():
    assert augment_text("hello world", "unknown") == ["hello world"]
    assert augment_text("", "en") == [""]
