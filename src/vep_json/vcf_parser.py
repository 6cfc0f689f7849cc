"""Reading VEP-annotated VCF files into annotated variants."""

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any
from urllib.parse import unquote

from cyvcf2 import VCF

from .models import AnnotatedVariant

logger = logging.getLogger(__name__)

# CSQ columns describing the locus rather than one feature overlap
COLOCATED_COLUMNS = {
    "Existing_variation",
    "CLIN_SIG",
    "SOMATIC",
    "PHENO",
    "PUBMED",
    "VAR_SYNONYMS",
}

LIST_COLUMNS = {"Consequence", "DOMAINS"}


def is_frequency_column(name: str) -> bool:
    return name == "AF" or name.endswith("_AF")


class VCFHeaderParser:
    """Parser for VCF header information."""

    def parse_info_fields(self, header_lines: list[str]) -> dict[str, dict[str, str]]:
        """Parse INFO field definitions from header lines."""
        info_fields = {}
        info_pattern = re.compile(r'##INFO=<(.+)>')

        for line in header_lines:
            match = info_pattern.match(line)
            if match:
                field_def = self._parse_field_definition(match.group(1))
                if field_def:
                    info_fields[field_def['ID']] = {
                        k: v for k, v in field_def.items() if k != 'ID'
                    }

        return info_fields

    def parse_csq_header(self, header_lines: list[str]) -> list[str]:
        """Parse VEP CSQ field structure from header."""
        csq_pattern = re.compile(r'##INFO=<ID=CSQ,.+Description=".*Format:\s*([^"]+)">')

        for line in header_lines:
            match = csq_pattern.match(line)
            if match:
                format_string = match.group(1)
                return [name.strip() for name in format_string.split('|')]

        return []

    def _parse_field_definition(self, field_string: str) -> dict[str, str] | None:
        """Parse a field definition string like 'ID=AC,Number=A,Type=Integer,Description="..."'"""
        field_def = {}

        # Commas inside the quoted description do not separate parts
        parts = []
        current_part = ""
        in_quotes = False

        for char in field_string:
            if char == '"':
                in_quotes = not in_quotes
                current_part += char
            elif char == ',' and not in_quotes:
                parts.append(current_part)
                current_part = ""
            else:
                current_part += char

        if current_part:
            parts.append(current_part)

        for part in parts:
            if '=' in part:
                key, value = part.split('=', 1)
                if key == 'Description' and value.startswith('"') and value.endswith('"'):
                    value = value[1:-1]
                field_def[key] = value

        return field_def if 'ID' in field_def else None


def vep_allele_string(pos: int, ref: str, alts: list[str]) -> tuple[int, int, str, list[str]]:
    """Convert VCF coordinates and alleles to the VEP representation.

    When any ALT differs in length from REF, a first base shared by REF and
    every ALT is the VCF padding base; it is removed and the start shifted by
    one, with ``-`` for an emptied allele. Same-length substitutions keep
    every base. ``*`` takes no part in the shared-base check and is kept
    as is. Variants with symbolic alleles are left untrimmed.

    Args:
        pos: 1-based VCF position
        ref: Reference allele
        alts: Alternative alleles

    Returns:
        Tuple of (start, end, allele_string, vep_alts)
    """
    alleles = [ref] + list(alts)
    start = pos

    symbolic = any(a.startswith("<") for a in alts)
    padded = [a for a in alleles if a != "*"]
    is_indel = any(len(a) != len(ref) for a in alts if a != "*")
    if (
        not symbolic
        and is_indel
        and all(len(a) > 0 for a in padded)
        and len({a[0] for a in padded}) == 1
    ):
        alleles = [a if a == "*" else a[1:] or "-" for a in alleles]
        start += 1

    vep_ref = alleles[0]
    ref_length = 0 if vep_ref == "-" else len(vep_ref)
    end = start + ref_length - 1

    return start, end, "/".join(alleles), alleles[1:]


class CSQParser:
    """Splits a CSQ INFO value into consequence fragments and locus data."""

    def __init__(self, csq_fields: list[str]):
        self.csq_fields = csq_fields

    def parse(self, csq_value: str) -> tuple[
        list[dict[str, Any]], list[dict[str, Any]], dict[str, dict[str, Any]]
    ]:
        """Parse all entries of a CSQ value.

        Returns:
            Tuple of (fragments, existing variants, per-allele frequencies)
        """
        fragments: list[dict[str, Any]] = []
        existing: dict[str, dict[str, Any]] = {}
        allele_frequencies: dict[str, dict[str, Any]] = {}

        for annotation in csq_value.split(','):
            values = annotation.split('|')
            if len(values) != len(self.csq_fields):
                logger.debug("Skipping CSQ entry with %d fields, expected %d",
                             len(values), len(self.csq_fields))
                continue

            entry = {
                name: self._decode(name, value)
                for name, value in zip(self.csq_fields, values, strict=True)
            }
            allele = entry.get("Allele")

            fragment = {}
            for name, value in entry.items():
                if is_frequency_column(name):
                    if value is not None and allele is not None:
                        allele_frequencies.setdefault(allele, {}).setdefault(name, [value])
                elif name not in COLOCATED_COLUMNS:
                    fragment[name] = value
            fragments.append(fragment)

            for known in self._existing_variants(entry):
                existing.setdefault(known["variation_name"], known)

        return fragments, list(existing.values()), allele_frequencies

    def _decode(self, name: str, value: str) -> Any:
        if value == "":
            return None
        if name in LIST_COLUMNS:
            return [unquote(v) for v in value.split("&") if v]
        return unquote(value)

    def _existing_variants(self, entry: dict[str, Any]) -> list[dict[str, Any]]:
        names = entry.get("Existing_variation")
        if not names:
            return []

        ids = names.split("&")
        somatic = self._positional(entry.get("SOMATIC"), len(ids))
        pheno = self._positional(entry.get("PHENO"), len(ids))

        variants = []
        for index, name in enumerate(ids):
            known: dict[str, Any] = {
                "variation_name": name,
                "somatic": somatic[index],
                "phenotype_or_disease": pheno[index],
            }
            # Locus-wide columns cannot be split per id; keep them on the first
            if index == 0:
                for column, key in (("CLIN_SIG", "clin_sig"), ("PUBMED", "pubmed")):
                    if entry.get(column):
                        known[key] = entry[column].replace("&", ",")
                if entry.get("VAR_SYNONYMS"):
                    known["var_synonyms"] = entry["VAR_SYNONYMS"]
            variants.append(known)

        return variants

    @staticmethod
    def _positional(value: str | None, count: int) -> list[str | None]:
        if value is None:
            return [None] * count
        parts = value.split("&")
        if len(parts) != count:
            return [value] + [None] * (count - 1)
        return parts


class VEPVariantReader:
    """Streams annotated variants from a VEP-annotated VCF file."""

    def __init__(self, vcf_path: Path | str, custom_fields: Iterable[str] = ()):
        self.vcf_path = Path(vcf_path)
        self.custom_fields = list(custom_fields)
        self.header_parser = VCFHeaderParser()
        self._vcf = VCF(str(self.vcf_path))

        header_lines = self._vcf.raw_header.splitlines()
        self.csq_fields = self.header_parser.parse_csq_header(header_lines)
        if not self.csq_fields:
            logger.warning("No CSQ header found in %s; records will carry no consequences",
                           self.vcf_path)
        self._csq_parser = CSQParser(self.csq_fields)

        info_fields = self.header_parser.parse_info_fields(header_lines)
        for name in self.custom_fields:
            if name not in info_fields:
                logger.warning("Custom annotation field %s is not defined in the header", name)

    def __iter__(self) -> Iterator[AnnotatedVariant]:
        for variant in self._vcf:
            yield self.to_annotated_variant(variant)

    def __enter__(self) -> "VEPVariantReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._vcf.close()

    def to_annotated_variant(self, variant) -> AnnotatedVariant:
        """Convert a cyvcf2 variant into an AnnotatedVariant."""
        alts = [alt for alt in variant.ALT if alt is not None]
        start, end, allele_string, _ = vep_allele_string(variant.POS, variant.REF, alts)
        variation_name = variant.ID if variant.ID and variant.ID != '.' else None

        fragments: list[dict[str, Any]] = []
        existing: list[dict[str, Any]] = []
        allele_frequencies: dict[str, dict[str, Any]] = {}

        csq_value = variant.INFO.get('CSQ')
        if csq_value and self.csq_fields:
            fragments, existing, allele_frequencies = self._csq_parser.parse(csq_value)
            for known in existing:
                known.update({"start": start, "end": end, "strand": 1})

        return AnnotatedVariant(
            variation_name=variation_name,
            chrom=variant.CHROM,
            start=start,
            end=end,
            strand=1,
            allele_string=allele_string,
            line=str(variant).rstrip("\n").split("\t"),
            variant_fields={
                "Uploaded_variation": variation_name or f"{variant.CHROM}_{variant.POS}",
                "Location": f"{variant.CHROM}:{start}-{end}",
            },
            fragments=fragments,
            existing=existing,
            allele_frequencies=allele_frequencies,
            custom_annotations=self._custom_annotations(variant),
        )

    def _custom_annotations(self, variant) -> dict[str, Any] | None:
        annotations = {}
        for name in self.custom_fields:
            value = variant.INFO.get(name)
            if value is None:
                continue
            if isinstance(value, tuple | list):
                value = ",".join(str(v) for v in value)
            annotations[name] = [{"name": str(value)}]
        return annotations or None
