"""Field validation for settlement payloads.

Validation collects every problem as a message instead of stopping at the
first one, so bulk routes can report per-item errors.
"""

import math
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from reglements_api.db.sql_queries import REGLEMENT_COLUMNS

DATE_FORMAT_HINT = "ISO format: YYYY-MM-DDTHH:mm:ssZ"

# Required text fields and the label used in error messages
REQUIRED_TEXT_FIELDS = [
    ("CLIENT", "CLIENT"),
    ("CONTRAT", "CONTRAT"),
    ("USERC", "USERC (Agent)"),
    ("FAMILLE", "FAMILLE"),
    ("SOUSFAMILLE", "SOUSFAMILLE (Sub-family)"),
    ("LIBELLE", "LIBELLE (Label)"),
    ("MODE", "MODE (Payment Method)"),
    ("TARIFAIRE", "TARIFAIRE (Rate)"),
]
TEXT_FIELDS = [field for field, _ in REQUIRED_TEXT_FIELDS]
DATE_FIELDS = ["DATE_CONTRAT", "DATE_DEBUT", "DATE_FIN", "DATE_ASSURANCE", "DATE_REGLEMENT"]

# Request field name -> column name
FIELD_COLUMNS = {"id_salle": "id_salle_id"}

ALLOWED_UPDATE_FIELDS = [
    "id_salle", "CONTRAT", "CLIENT", "DATE_CONTRAT", "DATE_DEBUT",
    "DATE_FIN", "USERC", "FAMILLE", "SOUSFAMILLE", "LIBELLE",
    "DATE_ASSURANCE", "MONTANT", "MODE", "TARIFAIRE", "DATE_REGLEMENT",
]

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def is_number(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not math.isnan(value)
    if isinstance(value, str) and value.strip():
        try:
            return not math.isnan(float(value))
        except ValueError:
            return False
    return False


def parse_id(value: Any) -> Optional[int]:
    """Read an integer id the lenient way: ``"12"``, ``12.0`` and ``"12abc"`` all give 12."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else int(value)
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def is_valid_date(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        datetime.fromisoformat(text)
    except ValueError:
        return False
    return True


def _is_missing(value: Any) -> bool:
    """Null, empty, false or numeric zero; a string "0" counts as present."""
    if value is None or value is False or value == "":
        return True
    return isinstance(value, (int, float)) and value == 0


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def validate_reglement(data: Dict[str, Any]) -> List[str]:
    """Check a full settlement payload; an empty list means it is valid."""
    errors = []

    montant = data.get("MONTANT")
    if _is_missing(montant) or not is_number(montant):
        errors.append("MONTANT is required and must be a valid number")

    for field, label in REQUIRED_TEXT_FIELDS:
        if _is_blank(data.get(field)):
            errors.append(f"{label} is required and cannot be empty")

    for field in DATE_FIELDS:
        value = data.get(field)
        if value is None or value == "":
            errors.append(f"{field} is required")
        elif not is_valid_date(value):
            errors.append(f"{field} must be a valid date ({DATE_FORMAT_HINT})")

    id_salle = data.get("id_salle")
    if _is_missing(id_salle) or not is_number(id_salle):
        errors.append("id_salle is required and must be a valid number")

    return errors


def reglement_values(data: Dict[str, Any]) -> List[Any]:
    """Values for a validated payload, ordered like REGLEMENT_COLUMNS."""
    values = []
    for column in REGLEMENT_COLUMNS:
        if column == "id_salle_id":
            values.append(parse_id(data["id_salle"]))
        elif column == "MONTANT":
            values.append(float(data["MONTANT"]))
        elif column in TEXT_FIELDS:
            values.append(data[column].strip())
        else:
            values.append(data[column])
    return values


def clean_update_fields(
    data: Dict[str, Any], salle_exists: Callable[[Any], bool]
) -> Tuple[Dict[str, Any], List[str]]:
    """Filter and coerce a partial update.

    Returns the fields to write, keyed by request field name, and the
    validation errors. ``None`` leaves numeric and text fields untouched but
    clears a date.
    """
    fields: Dict[str, Any] = {}
    errors: List[str] = []

    for key, value in data.items():
        if key not in ALLOWED_UPDATE_FIELDS:
            errors.append(f"Field '{key}' is not allowed to be updated")
            continue

        if key == "MONTANT":
            if value is None:
                continue
            if not is_number(value):
                errors.append("MONTANT must be a valid number")
            else:
                fields[key] = float(value)

        elif key == "id_salle":
            if value is None:
                continue
            if not is_number(value):
                errors.append("id_salle must be a valid number")
            elif not salle_exists(value):
                errors.append(f"Salle with id {value} not found")
            else:
                fields[key] = parse_id(value)

        elif key in DATE_FIELDS:
            if value is not None and not is_valid_date(value):
                errors.append(f"{key} must be a valid date ({DATE_FORMAT_HINT})")
            else:
                fields[key] = value

        elif key in TEXT_FIELDS:
            if value is None:
                continue
            trimmed = str(value).strip()
            if trimmed == "":
                errors.append(f"{key} cannot be empty")
            else:
                fields[key] = trimmed

    return fields, errors


def to_columns(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Rename request fields to their database columns."""
    return {FIELD_COLUMNS.get(key, key): value for key, value in fields.items()}
