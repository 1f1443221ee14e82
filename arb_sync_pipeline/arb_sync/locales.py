# Target locales supported by both the translation provider and Flutter's
# gen-l10n. Codes are the provider's; bundle filenames go through
# arb.normalize_locale_for_filename.
DEFAULT_SOURCE_LOCALE = "en"

DEFAULT_TARGET_LOCALES = [
    "af", "am", "ar", "as", "az", "be", "bg", "bn", "bs", "ca", "cs", "cy",
    "da", "de", "el", "es", "et", "eu", "fa", "fi", "fil", "fr", "fr-ca", "ga",
    "gl", "gu", "he", "hi", "hr", "hu", "hy", "id", "is", "it", "ja", "ka",
    "kk", "km", "kn", "ko", "lo", "lt", "lv", "mk", "ml", "mn", "mr", "ms",
    "my", "nb", "ne", "nl", "or", "pa", "pl", "ps", "pt", "pt-pt", "ro", "ru",
    "si", "sk", "sl", "sq", "sr-Cyrl", "sv", "sw", "ta", "te", "th", "tr",
    "uk", "ur", "uz", "vi", "zh-Hans", "zu",
]
