"""
Intelligent Import Classifier

Guesses which entity an imported spreadsheet/JSON record describes.

Scoring:
  every keyword found in a record key  -> +weight for its label
  every keyword found in a record value -> +weight for its label
  best label wins, ties go to the label declared first
  confidence = best / max(15, best)

Duplicate detection is advisory. Records are flagged, never dropped:
  properties  name + location
  clients     email, phone or id number (any of them)
  contracts   client + property + unit number
"""
from __future__ import annotations

import logging
import re
import uuid
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from rentdesk.schemas.importing import ImportItem

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"
MIN_CONFIDENCE_SCALE = 15
LABELS = ("properties", "clients", "contracts", "payments", "maintenance")

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class KeywordRule(BaseModel):
    keyword: str
    label: str
    weight: int


def _rules(label: str, groups: Sequence[Tuple[Sequence[str], int]]) -> List[KeywordRule]:
    return [KeywordRule(keyword=word, label=label, weight=weight) for words, weight in groups for word in words]


DEFAULT_RULES: List[KeywordRule] = (
    _rules("properties", [
        (["property", "building", "عقار", "مبنى"], 3),
        (["units", "وحدات", "floors", "أدوار"], 2),
        (["location", "موقع", "address", "عنوان"], 1),
        (["residential", "commercial", "سكني", "تجاري"], 2),
    ])
    + _rules("clients", [
        (["client", "tenant", "customer", "عميل", "مستأجر"], 3),
        (["phone", "هاتف", "mobile", "جوال"], 2),
        (["email", "بريد"], 2),
        (["id_number", "رقم_هوية", "national_id"], 2),
        (["nationality", "جنسية"], 1),
    ])
    + _rules("contracts", [
        (["contract", "عقد", "agreement", "اتفاقية"], 3),
        (["start_date", "end_date", "تاريخ_بداية", "تاريخ_نهاية"], 2),
        (["rent", "rental", "ايجار", "إيجار"], 2),
        (["unit_number", "رقم_وحدة"], 2),
        (["duration", "مدة"], 1),
    ])
    + _rules("payments", [
        (["payment", "دفعة", "installment", "قسط"], 3),
        (["amount", "مبلغ", "value", "قيمة"], 2),
        (["due_date", "تاريخ_استحقاق"], 2),
        (["paid", "مدفوع", "pending", "معلق"], 1),
        (["receipt", "إيصال", "invoice", "فاتورة"], 1),
    ])
    + _rules("maintenance", [
        (["maintenance", "صيانة", "repair", "إصلاح"], 3),
        (["issue", "problem", "مشكلة", "عطل"], 2),
        (["priority", "أولوية", "urgent", "عاجل"], 1),
        (["description", "وصف", "details", "تفاصيل"], 1),
    ])
)


# ── Classification ────────────────────────────────────────────────────────────

def score_record(record: dict, rules: Iterable[KeywordRule] = DEFAULT_RULES) -> Dict[str, int]:
    """Raw score per label, in label declaration order."""
    keys = [str(k).lower() for k in record.keys()]
    values = [str(v).lower() for v in record.values()]

    scores: Dict[str, int] = {}
    for rule in rules:
        scores.setdefault(rule.label, 0)
        word = rule.keyword.lower()
        hits = sum(1 for k in keys if word in k) + sum(1 for v in values if word in v)
        scores[rule.label] += hits * rule.weight
    return scores


def classify(record: dict, rules: Iterable[KeywordRule] = DEFAULT_RULES) -> Tuple[str, float]:
    """Return (label, confidence in 0..1). Records nothing matches are "unknown"."""
    scores = score_record(record, rules)
    if not scores:
        return UNKNOWN, 0.0

    best_label, best_score = UNKNOWN, 0
    for label, score in scores.items():
        if score > best_score:
            best_label, best_score = label, score

    if best_score == 0:
        return UNKNOWN, 0.0
    return best_label, min(1.0, best_score / max(MIN_CONFIDENCE_SCALE, best_score))


# ── Field access (English or Arabic column names) ─────────────────────────────

_FIELD_ALIASES = {
    "name": ("name", "اسم العقار", "اسم العميل"),
    "property_name": ("property_name", "name", "اسم العقار"),
    "client_name": ("client_name", "name", "اسم العميل"),
    "location": ("location", "الموقع"),
    "email": ("email", "البريد الإلكتروني"),
    "phone": ("phone", "رقم الهاتف"),
    "id_number": ("id_number", "رقم الهوية"),
    "unit_number": ("unit_number", "رقم الوحدة"),
    "amount": ("amount", "المبلغ"),
}


def field(record: dict, name: str) -> str:
    for alias in _FIELD_ALIASES.get(name, (name,)):
        value = record.get(alias)
        if value not in (None, ""):
            return str(value).strip()
    return ""


# ── Validation ────────────────────────────────────────────────────────────────

def validate_record(record: dict, label: str) -> List[str]:
    errors = []
    if label == "properties":
        if not field(record, "name"):
            errors.append("Property name is required")
        if not field(record, "location"):
            errors.append("Property location is required")
    elif label == "clients":
        if not field(record, "name"):
            errors.append("Client name is required")
        email = field(record, "email")
        if email and not _EMAIL.match(email):
            errors.append("Email address is not valid")
    elif label == "contracts":
        if not field(record, "client_name"):
            errors.append("Client name is required")
        if not field(record, "property_name"):
            errors.append("Property name is required")
    elif label == "payments":
        if not field(record, "amount"):
            errors.append("Payment amount is required")
    return errors


# ── Duplicate detection ───────────────────────────────────────────────────────

class DuplicateDetector:
    """
    Flags records that repeat something already stored or already seen
    earlier in the same batch.
    """

    def __init__(self, properties: Iterable = (), clients: Iterable = ()):
        self.existing_properties = {
            (p.name or "").lower() + "|" + (p.location or "").lower() for p in properties
        }
        clients = list(clients)
        self.existing_emails = {c.email.lower() for c in clients if c.email}
        self.existing_phones = {c.phone for c in clients if c.phone}
        self.existing_id_numbers = {c.id_number for c in clients if c.id_number}

        self._seen: Dict[str, set] = {"properties": set(), "clients": set(), "contracts": set()}

    def check(self, record: dict, label: str) -> Tuple[bool, Optional[str]]:
        if label == "properties":
            key = f"{field(record, 'name')}|{field(record, 'location')}".lower()
            if key in self._seen["properties"]:
                return True, "Same property name and location appears earlier in the file"
            if key in self.existing_properties:
                return True, "A property with this name and location already exists"
            self._seen["properties"].add(key)

        elif label == "clients":
            email, phone, id_number = field(record, "email"), field(record, "phone"), field(record, "id_number")
            key = f"{email}|{phone}|{id_number}".lower()
            if key in self._seen["clients"]:
                return True, "Same client details appear earlier in the file"
            if (
                (email and email.lower() in self.existing_emails)
                or (phone and phone in self.existing_phones)
                or (id_number and id_number in self.existing_id_numbers)
            ):
                return True, "A client with this email, phone or ID number already exists"
            self._seen["clients"].add(key)

        elif label == "contracts":
            key = "|".join(
                [field(record, "client_name"), field(record, "property_name"), field(record, "unit_number")]
            ).lower()
            if key in self._seen["contracts"]:
                return True, "Same client, property and unit appear earlier in the file"
            self._seen["contracts"].add(key)

        return False, None


# ── Batch analysis ────────────────────────────────────────────────────────────

def flatten_payload(payload) -> List[dict]:
    """Accept a list of records or a dict of sections holding lists."""
    if isinstance(payload, list):
        return [r for r in payload if isinstance(r, dict)]
    if isinstance(payload, dict):
        records = []
        for section in payload.values():
            if isinstance(section, list):
                records.extend(r for r in section if isinstance(r, dict))
        return records
    return []


def analyze_records(
    records: Iterable[dict],
    detector: Optional[DuplicateDetector] = None,
    rules: Iterable[KeywordRule] = DEFAULT_RULES,
) -> Dict[str, List[ImportItem]]:
    """Group records by guessed label with duplicate flags and validation errors."""
    rules = list(rules)
    detector = detector or DuplicateDetector()
    grouped: Dict[str, List[ImportItem]] = {label: [] for label in LABELS}
    grouped[UNKNOWN] = []

    for record in records:
        label, confidence = classify(record, rules)
        is_duplicate, reason = detector.check(record, label)
        grouped.setdefault(label, []).append(
            ImportItem(
                id=uuid.uuid4().hex,
                data=record,
                type=label,
                confidence=round(confidence, 3),
                is_duplicate=is_duplicate,
                duplicate_reason=reason,
                validation_errors=validate_record(record, label),
            )
        )

    logger.info(
        "[import] Analyzed records: "
        + ", ".join(f"{label}={len(items)}" for label, items in grouped.items())
    )
    return grouped
