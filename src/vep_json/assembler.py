"""Assembly of one nested JSON record per annotated variant."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from .config import OutputConfig
from .consequence import ConsequenceFieldFormatter
from .frequencies import FrequencyMerger, FrequencySource
from .models import AnnotatedVariant, alt_alleles
from .naming import NamingPolicy
from .numberify import numberify
from .severity import select_most_severe

logger = logging.getLogger(__name__)


class AssemblerConfigError(Exception):
    """Raised when the assembler is missing a required collaborator."""

    pass


class RecordAssembler:
    """Builds output records from annotated variants.

    Variants are processed one at a time in input order. The only change
    made to a source variant is detaching its custom annotations.
    """

    def __init__(
        self,
        config: OutputConfig | None,
        rank_table: Mapping[str, int] | None,
        frequency_source: FrequencySource | None,
        naming: NamingPolicy | None = None,
    ):
        if not rank_table:
            raise AssemblerConfigError("A consequence rank table is required")
        if frequency_source is None:
            raise AssemblerConfigError("A frequency source is required")

        self.config = config or OutputConfig()
        self.rank_table = rank_table
        self.frequency_source = frequency_source
        self.naming = naming or NamingPolicy.default()
        self._consequence_formatter = ConsequenceFieldFormatter(self.naming)
        self._frequency_merger = FrequencyMerger(self.naming)

    def assemble(self, variant: AnnotatedVariant) -> dict[str, Any]:
        """Build the output record for a single variant."""
        record = self._base_record(variant)

        buckets, terms = self._consequence_formatter.format_all(variant.fragments)
        record.update(buckets)
        record["most_severe_consequence"] = select_most_severe(terms, self.rank_table)

        colocated = self._colocated_variants(variant, record["allele_string"])
        if colocated:
            record["colocated_variants"] = colocated

        return numberify(record, self.naming.numberify_exempt)

    def iter_records(self, variants: Iterable[AnnotatedVariant]) -> Iterator[dict[str, Any]]:
        for variant in variants:
            yield self.assemble(variant)

    def assemble_batch(self, variants: Iterable[AnnotatedVariant]) -> list[dict[str, Any]]:
        """Build output records for a batch, preserving input order."""
        records = list(self.iter_records(variants))
        logger.debug("Assembled %d records", len(records))
        return records

    def _base_record(self, variant: AnnotatedVariant) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": variant.variation_name,
            "seq_region_name": variant.chrom,
            "start": variant.start,
            "end": variant.end,
            "strand": variant.strand,
            "allele_string": variant.allele_string or variant.class_so_term,
            "assembly_name": self.config.assembly_name,
        }

        if variant.line is not None:
            record["input"] = self.config.delimiter.join(variant.line)

        custom_annotations = variant.take_custom_annotations()
        if custom_annotations:
            record["custom_annotations"] = custom_annotations

        for key, value in variant.variant_fields.items():
            if key not in self.naming.skip_keys:
                record[key.lower()] = value

        return self.naming.rename(record)

    def _colocated_variants(
        self, variant: AnnotatedVariant, allele_string: str | None
    ) -> list[dict[str, Any]]:
        alleles = alt_alleles(allele_string)
        colocated = []

        for existing in variant.existing:
            allele_frequencies = {
                allele: self.frequency_source.allele_frequencies(variant, existing, allele)
                for allele in alleles
            }
            colocated.append(
                self._frequency_merger.merge(alleles, existing, allele_frequencies)
            )

        return colocated
