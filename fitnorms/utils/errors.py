# fitnorms/utils/errors.py
"""
Ошибки ядра расчёта нормативов.

Неполные данные (нет класса, пола, пары замеров, значения): это НЕ исключения:
они возвращаются как значения (UNRESOLVED, "no_data", "-").
Исключения бросаются только при нарушении контракта вызывающей стороной.
"""


class NormsError(Exception):
    """Базовое исключение пакета."""
    pass


class NotFoundError(NormsError, LookupError):
    """Несуществующий ученик / группа / замер / шаблон."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' не найден")


class ContractError(NormsError, ValueError):
    """Структурно некорректный вызов (ученик не из группы, класс вне диапазона шаблона и т.п.)."""
    pass


class InvalidGradeCodeError(ContractError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Недопустимая оценка: {code!r}")


class InstanceAlreadyExistsError(NormsError):
    """Контрольный замер для (группа, шаблон, период, учебный год) уже существует."""

    def __init__(self, group_id: str, template_id: str, period: str, academic_year: str):
        self.group_id = group_id
        self.template_id = template_id
        self.period = period
        self.academic_year = academic_year
        super().__init__(
            f"Замер {period} для шаблона '{template_id}' в группе '{group_id}' "
            f"за {academic_year} уже существует"
        )


class CatalogError(NormsError):
    """Исключение при проблемах с каталогом шаблонов."""
    pass
