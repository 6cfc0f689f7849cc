"""Most severe consequence selection."""

import logging
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

UNKNOWN_CONSEQUENCE = "?"

# Sequence Ontology consequence ranks as used by Ensembl VEP (lower = more severe)
DEFAULT_CONSEQUENCE_RANKS: Mapping[str, int] = {
    "transcript_ablation": 1,
    "splice_acceptor_variant": 3,
    "splice_donor_variant": 3,
    "stop_gained": 4,
    "frameshift_variant": 5,
    "stop_lost": 6,
    "start_lost": 7,
    "transcript_amplification": 8,
    "feature_elongation": 9,
    "feature_truncation": 9,
    "inframe_insertion": 10,
    "inframe_deletion": 11,
    "missense_variant": 12,
    "protein_altering_variant": 12,
    "splice_donor_5th_base_variant": 13,
    "splice_region_variant": 13,
    "splice_donor_region_variant": 13,
    "splice_polypyrimidine_tract_variant": 13,
    "incomplete_terminal_codon_variant": 14,
    "start_retained_variant": 15,
    "stop_retained_variant": 15,
    "synonymous_variant": 15,
    "coding_sequence_variant": 16,
    "mature_miRNA_variant": 17,
    "5_prime_UTR_variant": 18,
    "3_prime_UTR_variant": 19,
    "non_coding_transcript_exon_variant": 20,
    "intron_variant": 21,
    "NMD_transcript_variant": 22,
    "non_coding_transcript_variant": 23,
    "coding_transcript_variant": 24,
    "upstream_gene_variant": 24,
    "downstream_gene_variant": 25,
    "TFBS_ablation": 26,
    "TFBS_amplification": 28,
    "TF_binding_site_variant": 30,
    "regulatory_region_ablation": 31,
    "regulatory_region_amplification": 33,
    "regulatory_region_variant": 36,
    "intergenic_variant": 38,
    "sequence_variant": 39,
}


def select_most_severe(terms: Iterable[str], rank_table: Mapping[str, int]) -> str:
    """Pick the most severe consequence term.

    The term with the lowest rank wins. Equal ranks are resolved by the
    order of the rank table, and terms missing from the table rank after
    every known term.

    Args:
        terms: Consequence terms observed across all fragments of a variant.
        rank_table: Mapping of consequence term to rank.

    Returns:
        The most severe term, or ``?`` when no term remains after removing
        the ``?`` placeholder.
    """
    candidates = [term for term in terms if term != UNKNOWN_CONSEQUENCE]
    if not candidates:
        return UNKNOWN_CONSEQUENCE

    table_order = {term: index for index, term in enumerate(rank_table)}
    unranked = len(table_order)

    for term in candidates:
        if term not in rank_table:
            logger.debug("Consequence term %r missing from rank table", term)

    return min(
        candidates,
        key=lambda term: (
            term not in rank_table,
            rank_table.get(term, 0),
            table_order.get(term, unranked),
        ),
    )
