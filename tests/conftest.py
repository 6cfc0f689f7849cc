"""Pytest configuration and fixtures for vep-json tests."""

import sys
from pathlib import Path

import pytest

from vep_json.assembler import RecordAssembler
from vep_json.config import OutputConfig
from vep_json.frequencies import TableFrequencySource
from vep_json.models import AnnotatedVariant

sys.path.insert(0, str(Path(__file__).parent))


@pytest.fixture
def rank_table() -> dict[str, int]:
    """Small consequence rank table."""
    return {
        "transcript_ablation": 1,
        "stop_gained": 4,
        "missense_variant": 5,
        "synonymous_variant": 10,
        "intron_variant": 15,
        "regulatory_region_variant": 20,
        "?": 999,
    }


@pytest.fixture
def assembler(rank_table) -> RecordAssembler:
    """Assembler with a fixed assembly name and all frequency sources enabled."""
    return RecordAssembler(
        OutputConfig(assembly="GRCh38"),
        rank_table,
        TableFrequencySource(),
    )


@pytest.fixture
def missense_variant() -> AnnotatedVariant:
    """A/G SNV with one transcript fragment and one co-located variant."""
    return AnnotatedVariant(
        variation_name="var1",
        chrom="17",
        start=43094464,
        end=43094464,
        strand=1,
        allele_string="A/G",
        line=["17", "43094464", "var1", "A", "G"],
        variant_fields={"Uploaded_variation": "var1", "Location": "17:43094464"},
        fragments=[
            {
                "Allele": "G",
                "Consequence": ["missense_variant"],
                "IMPACT": "MODERATE",
                "SYMBOL": "BRCA1",
                "Gene": "ENSG00000012048",
                "Feature_type": "Transcript",
                "Feature": "ENST00000357654",
                "SIFT": "tolerated(0.8)",
                "cDNA_position": "34-36",
                "STRAND": "-1",
            }
        ],
        existing=[
            {
                "variation_name": "rs80357906",
                "start": "43094464",
                "failed": 0,
                "matched_alleles": [{"a_allele": "G"}],
                "somatic": 0,
            }
        ],
        allele_frequencies={"G": {"AMR_AF": [0.3]}},
    )
