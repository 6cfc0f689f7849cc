"""Tests for consequence fragment reshaping."""

import pytest

from vep_json.consequence import (
    ConsequenceFieldFormatter,
    parse_domains,
    parse_prediction,
    split_position,
)


@pytest.fixture
def formatter():
    return ConsequenceFieldFormatter()


class TestPositionSplitting:
    """Test <type>_position range splitting."""

    def test_range_splits_into_start_and_end(self):
        assert split_position("cdna", "34-36") == {"cdna_start": "34", "cdna_end": "36"}

    def test_single_coordinate_repeats_start(self):
        assert split_position("cds", "10") == {"cds_start": "10", "cds_end": "10"}

    def test_unknown_end_is_omitted(self):
        assert split_position("protein", "5-?") == {"protein_start": "5"}

    def test_unknown_start_is_omitted(self):
        assert split_position("cdna", "?-10") == {"cdna_end": "10"}

    def test_unknown_single_coordinate_drops_both(self):
        assert split_position("cds", "?") == {}

    def test_fragment_position_keys_are_replaced(self, formatter):
        result = formatter.format({
            "cDNA_position": "34-36",
            "CDS_position": "10",
            "Protein_position": "5-?",
        })

        assert result.fields == {
            "cdna_start": "34",
            "cdna_end": "36",
            "cds_start": "10",
            "cds_end": "10",
            "protein_start": "5",
        }


class TestPredictionParsing:
    """Test SIFT and PolyPhen string parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("deleterious(0.02)", {"sift_prediction": "deleterious", "sift_score": "0.02"}),
            ("tolerated_low_confidence(0.3)", {
                "sift_prediction": "tolerated_low_confidence",
                "sift_score": "0.3",
            }),
            ("deleterious", {"sift_prediction": "deleterious"}),
            ("(0.5)", {"sift_score": "0.5"}),
        ],
    )
    def test_prediction_shapes(self, value, expected):
        assert parse_prediction("sift", value) == expected

    def test_raw_keys_removed_from_fragment(self, formatter):
        result = formatter.format({
            "SIFT": "deleterious(0.02)",
            "PolyPhen": "probably_damaging(0.998)",
        })

        assert "sift" not in result.fields
        assert "polyphen" not in result.fields
        assert result.fields["sift_prediction"] == "deleterious"
        assert result.fields["sift_score"] == "0.02"
        assert result.fields["polyphen_prediction"] == "probably_damaging"
        assert result.fields["polyphen_score"] == "0.998"


class TestDomainParsing:
    """Test db:name domain parsing."""

    def test_complete_entries_kept(self):
        assert parse_domains(["Pfam:PF00533", "Gene3D:3.40.50.10190"]) == [
            {"db": "Pfam", "name": "PF00533"},
            {"db": "Gene3D", "name": "3.40.50.10190"},
        ]

    def test_incomplete_entries_dropped(self):
        assert parse_domains(["Pfam:", ":PF1", "nocolon", "Smart:SM00292"]) == [
            {"db": "Smart", "name": "SM00292"},
        ]

    def test_delimited_string_is_accepted(self, formatter):
        result = formatter.format({"DOMAINS": "Pfam:PF00533&PROSITE_profiles:PS50172"})

        assert result.fields["domains"] == [
            {"db": "Pfam", "name": "PF00533"},
            {"db": "PROSITE_profiles", "name": "PS50172"},
        ]

    def test_all_invalid_leaves_empty_list(self, formatter):
        result = formatter.format({"DOMAINS": ["broken"]})

        assert result.fields["domains"] == []


class TestValueCleaning:
    """Test placeholder removal and flag normalization."""

    def test_none_and_placeholder_dropped(self, formatter):
        result = formatter.format({"Amino_acids": "-", "Codons": None, "IMPACT": "LOW"})

        assert result.fields == {"impact": "LOW"}

    def test_allele_placeholder_kept(self, formatter):
        result = formatter.format({"Allele": "-"})

        assert result.fields == {"variant_allele": "-"}

    def test_yes_becomes_one(self, formatter):
        result = formatter.format({"CANONICAL": "YES"})

        assert result.fields == {"canonical": 1}

    def test_keys_lowercased(self, formatter):
        result = formatter.format({"BIOTYPE": "protein_coding", "HGVSc": "c.1A>G"})

        assert result.fields == {"biotype": "protein_coding", "hgvsc": "c.1A>G"}


class TestBucketsAndRenames:
    """Test feature-type buckets and key renaming."""

    @pytest.mark.parametrize(
        "feature_type,bucket",
        [
            ("Transcript", "transcript"),
            ("RegulatoryFeature", "regulatory_feature"),
            ("MotifFeature", "motif_feature"),
            (None, "intergenic"),
        ],
    )
    def test_bucket_from_feature_type(self, formatter, feature_type, bucket):
        result = formatter.format({"Feature_type": feature_type, "Feature": "F1"})

        assert result.bucket == bucket
        assert result.consequences_key == f"{bucket}_consequences"
        assert "feature_type" not in result.fields

    def test_feature_renamed_to_bucket_id(self, formatter):
        result = formatter.format({"Feature_type": "Transcript", "Feature": "ENST00000357654"})

        assert result.fields == {"transcript_id": "ENST00000357654"}

    def test_regulatory_feature_id(self, formatter):
        result = formatter.format({
            "Feature_type": "RegulatoryFeature",
            "Feature": "ENSR00000096218",
        })

        assert result.fields == {"regulatory_feature_id": "ENSR00000096218"}

    def test_unlisted_feature_type_uses_name_rewrite(self, formatter):
        result = formatter.format({"Feature_type": "StructuralFeature", "Feature": "X"})

        assert result.bucket == "structural_feature"
        assert result.fields == {"structural_feature_id": "X"}

    def test_shared_renames_applied(self, formatter):
        result = formatter.format({
            "Allele": "G",
            "Consequence": ["missense_variant"],
            "Gene": "ENSG00000012048",
            "SYMBOL": "BRCA1",
            "SYMBOL_SOURCE": "HGNC",
            "ENSP": "ENSP00000350283",
            "RefSeq": ["NM_007294.4"],
        })

        assert result.fields == {
            "variant_allele": "G",
            "consequence_terms": ["missense_variant"],
            "gene_id": "ENSG00000012048",
            "gene_symbol": "BRCA1",
            "gene_symbol_source": "HGNC",
            "protein_id": "ENSP00000350283",
            "refseq_transcript_ids": ["NM_007294.4"],
        }

    def test_terms_collected(self, formatter):
        result = formatter.format({"Consequence": ["splice_region_variant", "intron_variant"]})

        assert result.terms == ["splice_region_variant", "intron_variant"]

    def test_ampersand_joined_terms_split(self, formatter):
        result = formatter.format({"Consequence": "splice_region_variant&intron_variant"})

        assert result.terms == ["splice_region_variant", "intron_variant"]
        assert result.fields["consequence_terms"] == ["splice_region_variant", "intron_variant"]


class TestFormatAll:
    """Test bucket collection across fragments."""

    def test_empty_buckets_omitted(self, formatter):
        buckets, terms = formatter.format_all([
            {"Feature_type": "Transcript", "Feature": "T1", "Consequence": ["missense_variant"]},
            {"Feature_type": "Transcript", "Feature": "T2", "Consequence": ["intron_variant"]},
        ])

        assert list(buckets) == ["transcript_consequences"]
        assert "regulatory_feature_consequences" not in buckets
        assert [f["transcript_id"] for f in buckets["transcript_consequences"]] == ["T1", "T2"]
        assert terms == ["missense_variant", "intron_variant"]

    def test_no_fragments(self, formatter):
        assert formatter.format_all([]) == ({}, [])

    def test_source_fragment_not_modified(self, formatter):
        fragment = {"Feature_type": "Transcript", "SIFT": "deleterious(0.02)"}

        formatter.format(fragment)

        assert fragment == {"Feature_type": "Transcript", "SIFT": "deleterious(0.02)"}
