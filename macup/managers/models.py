"""Data models shared by manager integrations."""

from dataclasses import dataclass, field


@dataclass
class InstallResult:
    success: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.success) + len(self.failed) + len(self.skipped)

    def has_failures(self) -> bool:
        return bool(self.failed)


def parse_package_spec(spec: str) -> tuple[str, str]:
    """Split a ``package:binary`` identifier.

    Examples:
        >>> parse_package_spec("ripgrep:rg")
        ('ripgrep', 'rg')
        >>> parse_package_spec("prettier")
        ('prettier', 'prettier')
    """
    if ":" in spec:
        package, binary = spec.split(":", 1)
        return package.strip(), binary.strip()
    return spec.strip(), spec.strip()


__all__ = [
    "InstallResult",
    "parse_package_spec",
]
