"""Data models for annotated variants and raw consequence fields."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FeatureType(Enum):
    """Feature types a consequence fragment can overlap."""

    TRANSCRIPT = "transcript"
    REGULATORY_FEATURE = "regulatory_feature"
    MOTIF_FEATURE = "motif_feature"
    INTERGENIC = "intergenic"

    @property
    def bucket(self) -> str:
        return self.value

    @property
    def consequences_key(self) -> str:
        return f"{self.value}_consequences"

    @property
    def id_key(self) -> str:
        return f"{self.value}_id"

    @classmethod
    def from_raw(cls, value: str | None) -> "FeatureType":
        """Map an annotation engine feature type to a member.

        Raises:
            ValueError: If the feature type is not one of the known members.
        """
        if not value:
            return cls.INTERGENIC
        try:
            return _RAW_FEATURE_TYPES[value.lower()]
        except KeyError:
            raise ValueError(f"Unknown feature type: {value}") from None


_RAW_FEATURE_TYPES = {
    "transcript": FeatureType.TRANSCRIPT,
    "regulatoryfeature": FeatureType.REGULATORY_FEATURE,
    "regulatory_feature": FeatureType.REGULATORY_FEATURE,
    "motiffeature": FeatureType.MOTIF_FEATURE,
    "motif_feature": FeatureType.MOTIF_FEATURE,
    "intergenic": FeatureType.INTERGENIC,
}


def bucket_for(feature_type: str | None) -> str:
    """Bucket name for a raw feature type, including unlisted ones."""
    try:
        return FeatureType.from_raw(feature_type).bucket
    except ValueError:
        return feature_type.lower().replace("feature", "_feature", 1)


@dataclass(frozen=True)
class PositionField:
    """A ``<coord_type>_position`` value such as ``34-36``."""

    coord_type: str
    value: str


@dataclass(frozen=True)
class PredictionField:
    """A ``prediction(score)`` string from SIFT or PolyPhen."""

    tool: str
    value: str


@dataclass(frozen=True)
class DomainListField:
    """Protein domain entries in ``db:name`` form."""

    entries: list[str]


@dataclass(frozen=True)
class PlainField:
    key: str
    value: Any


RawField = PositionField | PredictionField | DomainListField | PlainField

PREDICTION_TOOLS = ("sift", "polyphen")

_POSITION_KEY = re.compile(r"^(\w+?)_position$", re.IGNORECASE)
_DOMAIN_SEPARATORS = re.compile(r"[&|]")


def classify_field(key: str, value: Any) -> RawField | None:
    """Classify one raw fragment key/value pair.

    Returns None for pairs that are dropped: undefined values and the ``-``
    placeholder on any key but the allele.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if value == "-" and key.lower() != "allele":
            return None
        if value == "YES":
            value = 1

    position_match = _POSITION_KEY.match(key)
    if position_match:
        return PositionField(coord_type=position_match.group(1).lower(), value=str(value))

    lower_key = key.lower()
    if lower_key in PREDICTION_TOOLS:
        return PredictionField(tool=lower_key, value=str(value))
    if lower_key == "domains":
        if isinstance(value, str):
            entries = [e for e in _DOMAIN_SEPARATORS.split(value) if e]
        else:
            entries = [str(e) for e in value]
        return DomainListField(entries=entries)
    return PlainField(key=lower_key, value=value)


def alt_alleles(allele_string: str | None) -> list[str]:
    """ALT alleles of a ``REF/ALT1/ALT2`` allele string."""
    if not allele_string:
        return []
    return allele_string.split("/")[1:]


@dataclass
class AnnotatedVariant:
    """An annotated input variant as handed over by the annotation engine."""

    variation_name: str | None
    chrom: str
    start: int
    end: int
    strand: int = 1
    allele_string: str | None = None
    class_so_term: str | None = None

    # Raw input tokens, joined for the ``input`` field
    line: list[str] | None = None

    # Variant-level engine output (e.g. Uploaded_variation, Location)
    variant_fields: dict[str, Any] = field(default_factory=dict)

    # One raw hash per allele/feature overlap
    fragments: list[dict[str, Any]] = field(default_factory=list)

    # Known variants at the same locus
    existing: list[dict[str, Any]] = field(default_factory=list)

    # allele -> {"<POP>_AF": [value], ...}
    allele_frequencies: dict[str, dict[str, Any]] = field(default_factory=dict)

    custom_annotations: dict[str, Any] | None = None

    def take_custom_annotations(self) -> dict[str, Any] | None:
        """Detach the custom annotation payload.

        Single use: the payload is returned once and the source keeps None,
        so the annotations are never emitted twice.
        """
        payload = self.custom_annotations
        self.custom_annotations = None
        return payload

    @property
    def alt_alleles(self) -> list[str]:
        return alt_alleles(self.allele_string)
