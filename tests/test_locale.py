from saad_social.i18n import LocaleProvider, get_messages, normalize_language


def test_english_is_default_and_ltr():
    locale = LocaleProvider()
    assert locale.language == "en"
    assert not locale.is_rtl
    assert locale.direction == "ltr"
    assert locale.t("sign_in") == get_messages("en")["sign_in"]


def test_arabic_is_rtl():
    locale = LocaleProvider("ar")
    assert locale.is_rtl
    assert locale.direction == "rtl"
    assert locale.t("sign_in") == get_messages("ar")["sign_in"]


def test_missing_arabic_key_falls_back_to_english_then_key():
    locale = LocaleProvider("ar")
    assert "error_weak_password" not in get_messages("ar")
    assert locale.t("error_weak_password") == get_messages("en")["error_weak_password"]
    assert locale.t("no_such_key") == "no_such_key"


def test_normalize_language():
    assert normalize_language("ar-SA") == "ar"
    assert normalize_language("fr") == "en"
    assert normalize_language(None) == "en"


def test_from_accept_language_picks_first_supported():
    assert LocaleProvider.from_accept_language("fr-FR,ar;q=0.8").language == "ar"
    assert LocaleProvider.from_accept_language("en-US,ar;q=0.8").language == "en"
    assert LocaleProvider.from_accept_language(None).language == "en"


def test_set_language_switches_direction():
    locale = LocaleProvider("en")
    locale.set_language("ar")
    assert locale.is_rtl
