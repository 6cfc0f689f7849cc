"""System dependency checker for vep-json."""

import importlib
import sys
from dataclasses import dataclass


@dataclass
class CheckResult:
    """Result of a dependency check."""

    name: str
    passed: bool
    version: str | None = None
    message: str | None = None


INSTALL_INSTRUCTIONS = {
    "python": "Python 3.11+ is required: https://www.python.org/downloads/",
    "cyvcf2": "pip install cyvcf2",
}

# cyvcf2 publishes no Windows wheels
WINDOWS_CYVCF2 = "cyvcf2 does not build on Windows; run vep-json under WSL"


class DependencyChecker:
    """Check system dependencies for vep-json."""

    def check_python(self) -> CheckResult:
        """Check Python version is 3.11+."""
        version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
        passed = sys.version_info >= (3, 11)

        return CheckResult(
            name="Python",
            passed=passed,
            version=version,
            message=None if passed else self.get_install_instructions("python"),
        )

    def check_cyvcf2(self) -> CheckResult:
        """Check if cyvcf2 is installed; it is only needed to read VCF input."""
        try:
            cyvcf2 = importlib.import_module("cyvcf2")
        except ImportError:
            return CheckResult(
                name="cyvcf2",
                passed=False,
                message=f"cyvcf2 not installed. {self.get_install_instructions('cyvcf2')}",
            )
        return CheckResult(
            name="cyvcf2",
            passed=True,
            version=getattr(cyvcf2, "__version__", "unknown"),
        )

    def check_all(self) -> list[CheckResult]:
        return [
            self.check_python(),
            self.check_cyvcf2(),
        ]

    def get_install_instructions(self, dependency: str, os_platform: str | None = None) -> str:
        """Installation hint for a dependency, for ``os_platform`` or the running one."""
        os_platform = (os_platform or sys.platform).lower()
        if dependency == "cyvcf2" and os_platform.startswith("win"):
            return WINDOWS_CYVCF2
        return INSTALL_INSTRUCTIONS.get(dependency, f"Please install {dependency}")
