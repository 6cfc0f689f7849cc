"""Reshaping of per-feature consequence fragments into the JSON schema.

Each raw fragment describes one allele overlapping one genomic feature. The
formatter lowercases its keys, splits coordinate ranges, parses SIFT and
PolyPhen strings and domain identifiers, renames keys to their output names
and files the fragment under a bucket derived from its feature type.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .models import (
    DomainListField,
    PlainField,
    PositionField,
    PredictionField,
    bucket_for,
    classify_field,
)
from .naming import NamingPolicy
from .numberify import looks_like_number

logger = logging.getLogger(__name__)

_PREDICTION_PATTERN = re.compile(r"([a-z_]+)?\(?([\d.]+)?\)?", re.IGNORECASE)


@dataclass
class FormattedConsequence:
    """A fragment after reshaping, with the terms it contributed."""

    bucket: str
    fields: dict[str, Any]
    terms: list[str] = field(default_factory=list)

    @property
    def consequences_key(self) -> str:
        return f"{self.bucket}_consequences"


def split_position(coord_type: str, value: str) -> dict[str, str]:
    """Split a ``start`` or ``start-end`` coordinate into start/end fields.

    A missing end repeats the start. Tokens that are not numbers, such as the
    ``?`` used for unknown protein coordinates, are omitted.
    """
    start, _, end = value.partition("-")
    if not end:
        end = start

    result = {}
    if looks_like_number(start):
        result[f"{coord_type}_start"] = start
    else:
        logger.debug("Dropping non-numeric %s start: %r", coord_type, value)
    if looks_like_number(end):
        result[f"{coord_type}_end"] = end
    else:
        logger.debug("Dropping non-numeric %s end: %r", coord_type, value)
    return result


def parse_prediction(tool: str, value: str) -> dict[str, str]:
    """Parse ``prediction(score)``, ``prediction`` or ``(score)`` strings."""
    result = {}
    match = _PREDICTION_PATTERN.search(value)
    if match:
        prediction, score = match.groups()
        if prediction:
            result[f"{tool}_prediction"] = prediction
        if score is not None:
            result[f"{tool}_score"] = score
    return result


def parse_domains(entries: Iterable[str]) -> list[dict[str, str]]:
    """Parse ``db:name`` domain entries, keeping only complete pairs."""
    domains = []
    for entry in entries:
        db, _, name = entry.partition(":")
        if db and name:
            domains.append({"db": db, "name": name})
        else:
            logger.debug("Skipping unparseable domain entry: %r", entry)
    return domains


def _consequence_terms(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [term for term in value.split("&") if term]
    return list(value)


class ConsequenceFieldFormatter:
    """Formats raw consequence fragments for one variant at a time."""

    def __init__(self, naming: NamingPolicy | None = None):
        self.naming = naming or NamingPolicy.default()

    def format(self, fragment: Mapping[str, Any]) -> FormattedConsequence:
        """Reshape a single raw fragment."""
        fields: dict[str, Any] = {}

        for key, value in fragment.items():
            raw_field = classify_field(key, value)
            match raw_field:
                case None:
                    continue
                case PositionField(coord_type=coord_type, value=position):
                    fields.update(split_position(coord_type, position))
                case PredictionField(tool=tool, value=prediction):
                    fields.update(parse_prediction(tool, prediction))
                case DomainListField(entries=entries):
                    fields["domains"] = parse_domains(entries)
                case PlainField(key=plain_key, value=plain_value):
                    fields[plain_key] = plain_value

        bucket = bucket_for(fields.pop("feature_type", None))

        terms = _consequence_terms(fields.get("consequence"))
        if "consequence" in fields:
            fields["consequence"] = terms

        fields = self.naming.rename(fields, extra={"feature": f"{bucket}_id"})

        return FormattedConsequence(bucket=bucket, fields=fields, terms=terms)

    def format_all(
        self, fragments: Iterable[Mapping[str, Any]]
    ) -> tuple[dict[str, list[dict[str, Any]]], list[str]]:
        """Format every fragment of a variant.

        Returns:
            Tuple of (bucket map keyed ``<bucket>_consequences``, all observed
            consequence terms in fragment order). Buckets without fragments
            are absent from the map.
        """
        buckets: dict[str, list[dict[str, Any]]] = {}
        terms: list[str] = []

        for fragment in fragments:
            formatted = self.format(fragment)
            buckets.setdefault(formatted.consequences_key, []).append(formatted.fields)
            terms.extend(formatted.terms)

        return buckets, terms
