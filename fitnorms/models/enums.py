# fitnorms/models/enums.py
import enum


class Sex(str, enum.Enum):
    """Канонический пол ученика. «Неизвестно» хранится как NULL."""
    MALE = "MALE"
    FEMALE = "FEMALE"


class SexScope(str, enum.Enum):
    """Для кого предназначен норматив."""
    ALL = "ALL"
    MALE = "MALE"
    FEMALE = "FEMALE"


class Direction(str, enum.Enum):
    LOWER_IS_BETTER = "LOWER_IS_BETTER"    # время, секунды
    HIGHER_IS_BETTER = "HIGHER_IS_BETTER"  # метры, количество повторов


class Period(str, enum.Enum):
    REGULAR = "REGULAR"
    START_OF_YEAR = "START_OF_YEAR"
    END_OF_YEAR = "END_OF_YEAR"


CONTROL_PERIODS = (Period.START_OF_YEAR, Period.END_OF_YEAR)
