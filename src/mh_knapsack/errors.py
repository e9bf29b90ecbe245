class KnapsackError(Exception):
    """Base class for every error raised by the knapsack core."""


class KeyGenerationFailure(KnapsackError, RuntimeError):
    pass


class InvalidBinaryLength(KnapsackError, ValueError):
    pass


class InvalidBitstring(KnapsackError, ValueError):
    pass


class IndexOutOfRange(KnapsackError, IndexError):
    pass


class NoModularInverse(KnapsackError, ArithmeticError):
    pass


class UnsupportedCharacter(KnapsackError, ValueError):
    def __init__(self, character: str, position: int):
        self.character = character
        self.position = position
        super().__init__(
            f"Character {character!r} (U+{ord(character):04X}) at position {position} "
            "does not fit in 8 bits"
        )


class MessageTooLong(KnapsackError, ValueError):
    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"String entered is too long ({length} characters). "
            f"Please enter a string with at most {max_length} characters."
        )
