from knot_client.i18n import (
    Translator,
    load_catalog,
    locale_from_env,
    match_catalog,
    negotiate_locale,
    resolve_locale,
)


class TestResolveLocale:
    def test_cookie_wins(self):
        assert resolve_locale("zh-CN", "en") == "zh-CN"

    def test_negotiated_when_no_cookie(self):
        assert resolve_locale(None, "zh-CN") == "zh-CN"
        assert resolve_locale("", "zh-CN") == "zh-CN"

    def test_fallback(self):
        assert resolve_locale(None, None) == "en"
        assert resolve_locale(None, None, fallback="zh-CN") == "zh-CN"


class TestNegotiateLocale:
    def test_highest_quality_supported_language(self):
        assert negotiate_locale("fr-FR,zh-CN;q=0.8,en;q=0.5") == "zh-CN"

    def test_base_language_match(self):
        assert negotiate_locale("zh-TW,en;q=0.1") == "zh"

    def test_quality_ordering_beats_position(self):
        assert negotiate_locale("en;q=0.3,zh-CN;q=0.9") == "zh-CN"

    def test_unsupported(self):
        assert negotiate_locale("fr,de;q=0.9") is None

    def test_empty_header(self):
        assert negotiate_locale(None) is None
        assert negotiate_locale("") is None

    def test_quality_after_other_parameters(self):
        assert negotiate_locale("en;level=1;q=0.2,zh-CN;q=0.5") == "zh-CN"

    def test_malformed_quality_is_ignored(self):
        assert negotiate_locale("zh-CN;q=abc,en") == "en"


class TestLocaleFromEnv:
    def test_lang(self, monkeypatch):
        monkeypatch.delenv("LANGUAGE", raising=False)
        monkeypatch.delenv("LC_ALL", raising=False)
        monkeypatch.delenv("LC_MESSAGES", raising=False)
        monkeypatch.setenv("LANG", "zh_CN.UTF-8")
        assert locale_from_env() == "zh-CN"

    def test_lc_all_takes_precedence(self, monkeypatch):
        monkeypatch.delenv("LANGUAGE", raising=False)
        monkeypatch.setenv("LC_ALL", "en_US.UTF-8")
        monkeypatch.setenv("LANG", "zh_CN.UTF-8")
        assert locale_from_env() == "en"

    def test_language_priority_list(self, monkeypatch):
        monkeypatch.setenv("LANGUAGE", "fr_FR:zh_CN:en")
        monkeypatch.setenv("LC_ALL", "en_US.UTF-8")
        assert locale_from_env() == "zh-CN"

    def test_unsupported_language_list_falls_through(self, monkeypatch):
        monkeypatch.setenv("LANGUAGE", "fr:de")
        monkeypatch.setenv("LC_ALL", "zh_CN.UTF-8")
        assert locale_from_env() == "zh-CN"

    def test_posix_locale_ignored(self, monkeypatch):
        monkeypatch.delenv("LANGUAGE", raising=False)
        monkeypatch.setenv("LC_ALL", "C")
        monkeypatch.delenv("LC_MESSAGES", raising=False)
        monkeypatch.delenv("LANG", raising=False)
        assert locale_from_env() is None


class TestTranslator:
    def test_english(self):
        t = Translator("en")
        assert t("param.required") == "Required"

    def test_chinese(self):
        t = Translator("zh-CN")
        assert t("param.required") == "必填"

    def test_region_falls_back_to_base_language(self):
        t = Translator("zh-TW")
        assert t.code == "zh"
        assert t("param.optional") == "可选"

    def test_unsupported_locale_uses_fallback(self):
        t = Translator("fr")
        assert t.code == "en"
        assert t("param.noParameters") == "No parameters"

    def test_missing_key_returns_key(self):
        assert Translator("zh-CN")("does.not.exist") == "does.not.exist"

    def test_placeholders(self):
        t = Translator("en")
        assert t.translate("group.created", name="Users", id=3) == "Created group Users (#3)"

    def test_catalogs_share_keys(self):
        assert set(load_catalog("en")) == set(load_catalog("zh-CN"))

    def test_zh_alias_uses_zh_cn_catalog(self):
        assert match_catalog("ZH-cn") == "zh-CN"
        assert load_catalog("zh") == load_catalog("zh-CN")
