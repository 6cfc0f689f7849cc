"""Co-located variant formatting and allele frequency merging.

Known variants at the same locus carry population allele frequencies for
each of the current variant's ALT alleles. These are merged into a single
``frequencies`` map keyed by allele and lowercase population code:

    {"frequencies": {"T": {"afr": 0.1, "eas": 0.0}}}
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .models import AnnotatedVariant
from .naming import (
    ESP_POPULATIONS,
    EXAC_POPULATIONS,
    GNOMAD_POPULATIONS,
    THOUSAND_GENOMES_POPULATIONS,
    NamingPolicy,
)

logger = logging.getLogger(__name__)

INTERNAL_KEYS = ("failed", "matched_alleles")


class FrequencySource(Protocol):
    """Protocol for per-allele frequency lookups on a co-located variant."""

    def allele_frequencies(
        self,
        variant: AnnotatedVariant,
        existing: Mapping[str, Any],
        allele: str,
    ) -> Mapping[str, Any]:
        """Return ``<POP>_AF`` values for one ALT allele."""
        ...


@dataclass
class TableFrequencySource:
    """Serves frequencies from the per-allele table of an annotated variant.

    The table holds one set of values per allele for the whole locus, so it
    is attached to the first co-located variant only. Each project flag
    gates the populations from that project.
    """

    af_1kg: bool = True
    af_esp: bool = True
    af_exac: bool = True
    af_gnomad: bool = True

    def enabled_populations(self) -> set[str]:
        populations: set[str] = set()
        if self.af_1kg:
            populations.update(THOUSAND_GENOMES_POPULATIONS)
        if self.af_esp:
            populations.update(ESP_POPULATIONS)
        if self.af_exac:
            populations.update(EXAC_POPULATIONS)
        if self.af_gnomad:
            populations.update(GNOMAD_POPULATIONS)
        return populations

    def allele_frequencies(
        self,
        variant: AnnotatedVariant,
        existing: Mapping[str, Any],
        allele: str,
    ) -> Mapping[str, Any]:
        if not variant.existing or existing is not variant.existing[0]:
            return {}

        enabled = {f"{pop}_AF" for pop in self.enabled_populations()}
        values = variant.allele_frequencies.get(allele, {})
        return {key: value for key, value in values.items() if key in enabled}


def parse_var_synonyms(value: str) -> dict[str, list[str]]:
    """Parse ``source::syn1,syn2--source2::syn3`` into a source mapping."""
    synonyms: dict[str, list[str]] = {}
    for entry in value.split("--"):
        if not entry:
            continue
        source, _, names = entry.partition("::")
        synonyms[source] = [name for name in names.split(",") if name]
    return synonyms


def _first_value(value: Any) -> Any:
    if isinstance(value, list | tuple):
        return value[0] if value else None
    return value


def _is_zero(value: Any) -> bool:
    if isinstance(value, str):
        return value == "0"
    return isinstance(value, int | float) and value == 0


class FrequencyMerger:
    """Builds the output form of a co-located known variant."""

    def __init__(self, naming: NamingPolicy | None = None):
        self.naming = naming or NamingPolicy.default()

    def merge(
        self,
        alleles: Iterable[str],
        existing: Mapping[str, Any],
        allele_frequencies: Mapping[str, Mapping[str, Any]],
    ) -> dict[str, Any]:
        """Merge frequencies into a copy of a co-located variant.

        Args:
            alleles: ALT alleles of the current variant.
            existing: Raw co-located variant; never modified.
            allele_frequencies: ``<POP>_AF`` values per ALT allele.

        Returns:
            Co-located variant ready for the output record.
        """
        colocated = dict(existing)
        for key in INTERNAL_KEYS:
            colocated.pop(key, None)

        frequencies: dict[str, dict[str, Any]] = {}
        for allele in alleles:
            values = allele_frequencies.get(allele, {})
            for pop in self.naming.frequency_populations:
                frequency = _first_value(values.get(f"{pop}_AF"))
                if frequency is not None:
                    frequencies.setdefault(allele, {})[pop.lower()] = frequency

        for pop in self.naming.frequency_populations:
            colocated.pop(pop, None)
            colocated.pop(f"{pop}_AF", None)

        if frequencies:
            colocated["frequencies"] = frequencies

        colocated = {
            key: value
            for key, value in colocated.items()
            if not self._is_empty(key, value)
        }

        colocated = self.naming.rename(colocated)

        for list_field in self.naming.list_fields:
            value = colocated.get(list_field)
            if isinstance(value, str):
                colocated[list_field] = value.split(",")

        var_synonyms = colocated.get("var_synonyms")
        if isinstance(var_synonyms, str):
            colocated["var_synonyms"] = parse_var_synonyms(var_synonyms)

        return colocated

    def _is_empty(self, key: str, value: Any) -> bool:
        if value is None or value == "":
            return True
        if key in self.naming.frequency_fields or isinstance(value, bool):
            return False
        return _is_zero(value)
