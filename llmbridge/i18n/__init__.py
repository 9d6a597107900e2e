from .bundle import Bundle, TranslationFunc, init_bundle, localizer_func
