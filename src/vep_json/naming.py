"""Key naming tables shared by the JSON record formatters."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

RENAME_KEYS = MappingProxyType({
    "consequence": "consequence_terms",
    "gene": "gene_id",
    "allele": "variant_allele",
    "symbol": "gene_symbol",
    "symbol_source": "gene_symbol_source",
    "overlapbp": "bp_overlap",
    "overlappc": "percentage_overlap",
    "refseq": "refseq_transcript_ids",
    "ensp": "protein_id",
    "chr": "seq_region_name",
    "variation_name": "id",
    "sv": "colocated_structural_variants",
})

SKIP_KEYS = frozenset({"Uploaded_variation", "Location"})

NUMBERIFY_EXEMPT = frozenset({
    "seq_region_name",
    "id",
    "gene_id",
    "gene_symbol",
    "transcript_id",
})

LIST_FIELDS = ("clin_sig", "pubmed")

THOUSAND_GENOMES_POPULATIONS = ("AFR", "AMR", "ASN", "EAS", "SAS", "EUR")
ESP_POPULATIONS = ("AA", "EA")
EXAC_POPULATIONS = (
    "ExAC", "ExAC_Adj", "ExAC_AFR", "ExAC_AMR", "ExAC_EAS",
    "ExAC_FIN", "ExAC_NFE", "ExAC_OTH", "ExAC_SAS",
)
GNOMAD_POPULATIONS = (
    "gnomAD", "gnomAD_AFR", "gnomAD_AMR", "gnomAD_ASJ", "gnomAD_EAS",
    "gnomAD_FIN", "gnomAD_NFE", "gnomAD_OTH", "gnomAD_SAS",
)

FREQUENCY_POPULATIONS = (
    THOUSAND_GENOMES_POPULATIONS + ESP_POPULATIONS + EXAC_POPULATIONS + GNOMAD_POPULATIONS
)

# Co-located fields where a zero value is data, not an empty placeholder
FREQUENCY_FIELDS = frozenset({"frequencies", "minor_allele_freq", "af"})


@dataclass(frozen=True)
class NamingPolicy:
    """Read-only naming configuration passed to each formatter."""

    rename_keys: Mapping[str, str] = field(default_factory=lambda: RENAME_KEYS)
    skip_keys: frozenset[str] = SKIP_KEYS
    numberify_exempt: frozenset[str] = NUMBERIFY_EXEMPT
    list_fields: tuple[str, ...] = LIST_FIELDS
    frequency_populations: tuple[str, ...] = FREQUENCY_POPULATIONS
    frequency_fields: frozenset[str] = FREQUENCY_FIELDS

    @classmethod
    def default(cls) -> "NamingPolicy":
        return _DEFAULT_POLICY

    def rename(
        self,
        data: Mapping[str, Any],
        extra: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Return a copy of ``data`` with renamed keys.

        Only keys holding a value other than ``None`` are renamed, matching
        how the output schema treats undefined values.

        Args:
            data: Mapping to rename.
            extra: Additional renames for this call only, e.g. the generic
                ``feature`` key of a consequence fragment.

        Returns:
            New dictionary with renamed keys.
        """
        renames = dict(self.rename_keys)
        if extra:
            renames.update(extra)

        result = dict(data)
        for key, new_key in renames.items():
            if result.get(key) is not None:
                result[new_key] = result.pop(key)
        return result


_DEFAULT_POLICY = NamingPolicy()
