from .locale import LocaleProvider, get_messages, normalize_language, SUPPORTED_LANGUAGES, DEFAULT_LANGUAGE
