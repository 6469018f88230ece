from __future__ import annotations

import os
from pathlib import Path
from typing import List, Dict, Any, Tuple

import yaml
from loguru import logger
from sqlalchemy.orm import Session

from fitnorms.models.enums import Direction, SexScope
from fitnorms.models.template import NormTemplate, TemplateBoundary
from fitnorms.utils.errors import CatalogError
from fitnorms.utils.gender import normalize_sex
from fitnorms.utils.grading import GRADES, BoundaryTable


# Корневая папка с YAML-файлами шаблонов (можно переопределить FITNORMS_CATALOG)
CATALOG_ROOT = Path(os.getenv("FITNORMS_CATALOG") or Path(__file__).resolve().parents[1] / "norms_catalog")

ALLOWED_DIRECTIONS = {d.value for d in Direction}
ALLOWED_SCOPES = {s.value for s in SexScope}


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Читает YAML и возвращает dict. Бросает CatalogError при ошибке."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(f"Ошибка чтения YAML {path}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"Формат YAML должен быть объектом (mapping): {path}")
    return data


def discover_templates(root: Path | None = None) -> List[Path]:
    """Все *.yaml / *.yml в каталоге шаблонов, отсортированные по пути."""
    root = Path(root) if root else CATALOG_ROOT
    if not root.exists():
        return []
    return sorted([p for p in root.rglob("*.y*ml") if p.is_file()])


def _validate_meta(meta: Dict[str, Any], path: Path) -> Tuple[str, str, int, int, str, str]:
    """
    Валидирует метаданные шаблона и возвращает кортеж:
    (code, name, class_from, class_to, direction, sex_scope)
    """
    required = ("code", "name", "classes", "direction")
    missing = [k for k in required if k not in meta]
    if missing:
        raise CatalogError(f"{path}: отсутствуют meta поля: {', '.join(missing)}")

    code = str(meta["code"]).strip()
    name = str(meta["name"]).strip()
    direction = str(meta["direction"]).strip().upper()
    sex_scope = str(meta.get("sex_scope") or "ALL").strip().upper()

    classes = meta["classes"]
    if not (isinstance(classes, list) and len(classes) == 2):
        raise CatalogError(f"{path}: meta.classes должен быть парой [от, до]")
    try:
        class_from, class_to = int(classes[0]), int(classes[1])
    except (TypeError, ValueError) as e:
        raise CatalogError(f"{path}: meta.classes должны быть целыми числами") from e

    if not code:
        raise CatalogError(f"{path}: meta.code пуст")
    if not name:
        raise CatalogError(f"{path}: meta.name пуст")
    if class_from > class_to:
        raise CatalogError(f"{path}: meta.classes: {class_from} > {class_to}")
    if direction not in ALLOWED_DIRECTIONS:
        raise CatalogError(f"{path}: direction должен быть одним из {sorted(ALLOWED_DIRECTIONS)}")
    if sex_scope not in ALLOWED_SCOPES:
        raise CatalogError(f"{path}: sex_scope должен быть одним из {sorted(ALLOWED_SCOPES)}")

    return code, name, class_from, class_to, direction, sex_scope


def _parse_boundaries(raw: Any, path: Path) -> List[TemplateBoundary]:
    """
    Формат:
      boundaries:
        4:            # класс
          М:          # пол (М/Ж или MALE/FEMALE)
            5: [1, 6.2]
            4: [6.3, 6.8]
    """
    if not isinstance(raw, dict):
        raise CatalogError(f"{path}: 'boundaries' должен быть объектом (класс → пол → оценка)")

    rows: List[TemplateBoundary] = []
    for class_key, by_sex in raw.items():
        try:
            class_number = int(class_key)
        except (TypeError, ValueError) as e:
            raise CatalogError(f"{path}: класс {class_key!r} должен быть числом") from e
        if not isinstance(by_sex, dict):
            raise CatalogError(f"{path}: класс {class_number}: ожидается пол → оценки")

        for sex_key, by_grade in by_sex.items():
            sex = normalize_sex(sex_key)
            if sex is None:
                raise CatalogError(f"{path}: класс {class_number}: неизвестный пол {sex_key!r}")
            if not isinstance(by_grade, dict):
                raise CatalogError(f"{path}: класс {class_number}, {sex_key}: ожидается оценка → [от, до]")

            for grade_key, rng in by_grade.items():
                try:
                    grade = int(grade_key)
                except (TypeError, ValueError) as e:
                    raise CatalogError(f"{path}: оценка {grade_key!r} должна быть числом") from e
                if grade not in GRADES:
                    raise CatalogError(f"{path}: оценка {grade_key!r} вне 2..5")
                if not (isinstance(rng, (list, tuple)) and len(rng) == 2):
                    raise CatalogError(f"{path}: диапазон оценки {grade} должен быть [от, до]")
                try:
                    lo, hi = float(rng[0]), float(rng[1])
                except (TypeError, ValueError) as e:
                    raise CatalogError(f"{path}: оценка {grade}, класс {class_number}: границы должны быть числами") from e
                if lo > hi:
                    raise CatalogError(f"{path}: оценка {grade}, класс {class_number}: {lo} > {hi}")
                rows.append(TemplateBoundary(
                    grade=grade, sex=sex, class_number=class_number, from_value=lo, to_value=hi,
                ))
    return rows


def import_template_file(db: Session, path: Path) -> str:
    """
    Импортирует один YAML-файл шаблона в БД (upsert по meta.code).
    Границы шаблона заменяются целиком; сам шаблон не удаляется,
    т.к. на него могут ссылаться замеры. Возвращает код шаблона.
    """
    data = _load_yaml(path)
    meta = data.get("meta") or {}
    code, name, class_from, class_to, direction, sex_scope = _validate_meta(meta, path)
    boundaries = _parse_boundaries(data.get("boundaries") or {}, path)

    # Пересечения не блокируют импорт: только предупреждаем
    for a, b in BoundaryTable.of(boundaries).overlaps():
        logger.warning(
            "{}: пересекаются диапазоны оценок {} и {} ({}, класс {})",
            code, a.grade, b.grade, a.sex.value, a.class_number,
        )

    template = db.query(NormTemplate).filter(NormTemplate.code == code).first()
    if template is None:
        template = NormTemplate(code=code)
        db.add(template)

    template.name = name
    template.unit = meta.get("unit")
    template.class_from = class_from
    template.class_to = class_to
    template.direction = Direction(direction)
    template.sex_scope = SexScope(sex_scope)
    template.is_public = True
    template.boundaries = boundaries

    db.commit()
    return code


def import_all(db: Session, root: Path | None = None, stop_on_error: bool = False) -> Dict[str, Any]:
    """
    Импортирует все шаблоны из каталога.
    Возвращает словарь: { imported: [codes], errors: {path: error}, root: str, count: int }
    Если stop_on_error=True: при первой ошибке бросает исключение.
    """
    root = Path(root) if root else CATALOG_ROOT
    files = discover_templates(root)
    imported: List[str] = []
    errors: Dict[str, str] = {}

    for p in files:
        try:
            imported.append(import_template_file(db, p))
        except CatalogError as e:
            db.rollback()
            errors[str(p)] = str(e)
            logger.error("Шаблон {} не импортирован: {}", p, e)
            if stop_on_error:
                raise

    logger.info("Импорт шаблонов из {}: {} шт., ошибок {}", root, len(imported), len(errors))
    return {"imported": imported, "errors": errors, "root": str(root), "count": len(imported)}


if __name__ == "__main__":
    # Локальный запуск: python -m fitnorms.utils.template_loader
    from fitnorms.database import Base, SessionLocal, engine
    import fitnorms.models  # noqa: F401  (регистрация таблиц)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        result = import_all(db)
        logger.info("Импорт завершён: {}", result)
    finally:
        db.close()
