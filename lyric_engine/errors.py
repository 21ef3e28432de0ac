class LyricEngineError(RuntimeError):
    pass


class InvalidPatternError(LyricEngineError, ValueError):
    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class UnsupportedEncodingError(LyricEngineError, ValueError):
    pass


class UnsupportedFormatError(LyricEngineError, ValueError):
    pass
