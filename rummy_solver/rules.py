from dataclasses import dataclass


@dataclass(frozen=True)
class Ruleset:
    colors: int = 4
    values: int = 13
    min_meld_size: int = 3
    max_group_size: int = 4

    def __post_init__(self) -> None:
        if not 1 <= self.colors <= 4:
            raise ValueError("colors must be between 1 and 4")
        if not 1 <= self.values <= 13:
            raise ValueError("values must be between 1 and 13")
        if self.min_meld_size < 1:
            raise ValueError("min_meld_size must be positive")
        if self.max_group_size < self.min_meld_size:
            raise ValueError("max_group_size must be at least min_meld_size")

    def max_run_start(self) -> int:
        return self.values - self.min_meld_size + 1


DEFAULT_RULESET = Ruleset()
