"""vep-json: consolidated JSON records from VEP-annotated variants."""

from .assembler import AssemblerConfigError, RecordAssembler
from .config import ConfigValidationError, OutputConfig, load_config
from .consequence import ConsequenceFieldFormatter, FormattedConsequence
from .frequencies import FrequencyMerger, FrequencySource, TableFrequencySource
from .models import AnnotatedVariant, FeatureType
from .naming import NamingPolicy
from .numberify import numberify
from .severity import DEFAULT_CONSEQUENCE_RANKS, select_most_severe

__version__ = "0.1.0"

__all__ = [
    "AnnotatedVariant",
    "AssemblerConfigError",
    "ConfigValidationError",
    "ConsequenceFieldFormatter",
    "DEFAULT_CONSEQUENCE_RANKS",
    "FeatureType",
    "FormattedConsequence",
    "FrequencyMerger",
    "FrequencySource",
    "NamingPolicy",
    "OutputConfig",
    "RecordAssembler",
    "TableFrequencySource",
    "load_config",
    "numberify",
    "select_most_severe",
]
