"""
Pre-write normalization hooks.

Each listener runs on before_insert/before_update, i.e. as the last step
before the row is written. Repairs are logged so silent data loss is visible.
"""
from typing import Callable, Dict

from sqlalchemy import event

from careermate.services.shape_normalizer import Rule
from careermate.utils.logger import get_logger

logger = get_logger("normalizer")


def normalize_on_write(model, rules: Dict[str, Rule]) -> Callable:
    """Apply one shape rule per column of `model` before every insert/update"""

    def _normalize(mapper, connection, target):
        repaired = []
        for column, rule in rules.items():
            before = getattr(target, column)
            after = rule(before)
            if after != before:
                repaired.append(column)
                setattr(target, column, after)
        if repaired:
            logger.warning(
                f"Normalized {model.__tablename__} before write",
                extra={"entity": model.__tablename__, "repaired_fields": repaired},
            )

    event.listen(model, "before_insert", _normalize)
    event.listen(model, "before_update", _normalize)
    return _normalize
